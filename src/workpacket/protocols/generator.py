"""Protocol for the text-generation collaborator."""

from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable


@dataclass(frozen=True)
class GenerationRequest:
    """One system/user exchange sent to a generation backend."""

    system: str
    user: str
    max_tokens: Optional[int] = None


@dataclass(frozen=True)
class GenerationResult:
    """Completion text plus usage counters."""

    text: str
    input_tokens: int = 0
    output_tokens: int = 0


@runtime_checkable
class GenerationClient(Protocol):
    """Protocol for text-generation backends.

    Calls may be slow and may fail. Failures propagate to the calling stage,
    which decides whether they are fatal.
    """

    @property
    def model_name(self) -> str:
        """Return identifier for the model used."""
        ...

    def generate(self, request: GenerationRequest) -> GenerationResult:
        """Run one completion."""
        ...
