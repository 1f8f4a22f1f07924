"""OpenAI chat-completions generation backend."""

import logging
from typing import Any, Optional

from openai import OpenAI, OpenAIError

from workpacket.config import Settings, get_settings
from workpacket.exceptions import GenerationError
from workpacket.protocols import GenerationRequest, GenerationResult

logger = logging.getLogger(__name__)


class OpenAIGenerator:
    """Generation client backed by the OpenAI chat-completions API.

    The underlying client is created on first use, so constructing a
    generator never touches the network or requires a key.
    """

    def __init__(self, settings: Optional[Settings] = None, client: Any = None):
        self._settings = settings or get_settings()
        self._client = client

    @property
    def client(self) -> Any:
        """Lazy-create the OpenAI client on first access."""
        if self._client is None:
            if not self._settings.openai_api_key:
                raise GenerationError(
                    "No OpenAI API key configured. Set OPENAI_API_KEY or WORKPACKET_OPENAI_API_KEY."
                )
            self._client = OpenAI(
                api_key=self._settings.openai_api_key,
                base_url=self._settings.openai_base_url,
            )
        return self._client

    @property
    def model_name(self) -> str:
        return self._settings.model

    def generate(self, request: GenerationRequest) -> GenerationResult:
        """Run one completion and return its text and token usage."""
        try:
            response = self.client.chat.completions.create(
                model=self.model_name,
                messages=[
                    {"role": "system", "content": request.system},
                    {"role": "user", "content": request.user},
                ],
                max_tokens=request.max_tokens or self._settings.max_tokens,
                temperature=self._settings.temperature,
            )
        except OpenAIError as e:
            raise GenerationError(f"Generation request failed: {e}") from e

        if not response.choices or not response.choices[0].message.content:
            raise GenerationError("Generation backend returned no text content")

        usage = response.usage
        result = GenerationResult(
            text=response.choices[0].message.content,
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
        )
        logger.debug(
            f"Generated {len(result.text)} chars "
            f"({result.input_tokens} in / {result.output_tokens} out tokens)"
        )
        return result
