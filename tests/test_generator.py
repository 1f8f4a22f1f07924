from types import SimpleNamespace

import pytest

from workpacket.config import Settings
from workpacket.exceptions import GenerationError
from workpacket.generators import OpenAIGenerator
from workpacket.protocols import GenerationClient, GenerationRequest


class FakeCompletions:
    def __init__(self, content):
        self.content = content
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(
            choices=[SimpleNamespace(message=message)],
            usage=SimpleNamespace(prompt_tokens=12, completion_tokens=34),
        )


def fake_client(content):
    return SimpleNamespace(chat=SimpleNamespace(completions=FakeCompletions(content)))


def test_generate_maps_request_and_usage():
    client = fake_client("hello")
    generator = OpenAIGenerator(Settings(model="test-model", max_tokens=100), client=client)

    result = generator.generate(GenerationRequest(system="sys", user="usr", max_tokens=50))

    assert result.text == "hello"
    assert (result.input_tokens, result.output_tokens) == (12, 34)
    call = client.chat.completions.calls[0]
    assert call["model"] == "test-model"
    assert call["max_tokens"] == 50
    assert call["messages"] == [
        {"role": "system", "content": "sys"},
        {"role": "user", "content": "usr"},
    ]


def test_default_max_tokens_comes_from_settings():
    client = fake_client("hello")
    generator = OpenAIGenerator(Settings(max_tokens=100), client=client)

    generator.generate(GenerationRequest(system="s", user="u"))

    assert client.chat.completions.calls[0]["max_tokens"] == 100


def test_empty_completion_raises():
    generator = OpenAIGenerator(Settings(), client=fake_client(""))
    with pytest.raises(GenerationError):
        generator.generate(GenerationRequest(system="s", user="u"))


def test_missing_api_key_raises_on_first_use(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("WORKPACKET_OPENAI_API_KEY", raising=False)
    generator = OpenAIGenerator(Settings(openai_api_key=None))

    with pytest.raises(GenerationError, match="API key"):
        generator.generate(GenerationRequest(system="s", user="u"))


def test_generator_satisfies_protocol():
    assert isinstance(OpenAIGenerator(Settings()), GenerationClient)


def test_settings_read_prefixed_environment(monkeypatch):
    monkeypatch.setenv("WORKPACKET_MODEL", "other-model")
    monkeypatch.setenv("WORKPACKET_RETRIEVAL_LIMIT", "5")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

    settings = Settings()

    assert settings.model == "other-model"
    assert settings.retrieval_limit == 5
    assert settings.openai_api_key == "sk-test"
