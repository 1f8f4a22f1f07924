"""Stage outcomes and output contracts.

A stage reports one of two outcomes:

- ``Candidate(value)``: a value to check against the stage's contract. If it
  fails, the orchestrator retries the stage.
- ``Fatal(reason)``: an unrecoverable fault. The run stops immediately.

A contract turns a candidate into ``Valid(value)`` (possibly normalized, e.g.
a dict parsed into a pydantic model) or ``Invalid(issues)``.
"""

from dataclasses import dataclass, field
from typing import Annotated, Any, Generic, Protocol, Type, TypeVar, Union, runtime_checkable

from pydantic import BaseModel, StringConstraints, TypeAdapter, ValidationError

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True)
class Candidate(Generic[T]):
    value: T


@dataclass(frozen=True)
class Fatal:
    reason: str


StageOutcome = Union[Candidate, Fatal]


def as_outcome(result: Any) -> StageOutcome:
    """Wrap a bare stage return value as a Candidate."""
    if isinstance(result, (Candidate, Fatal)):
        return result
    return Candidate(result)


@dataclass(frozen=True)
class Issue:
    """One contract violation, located by a dotted path."""

    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}" if self.path else self.message


@dataclass(frozen=True)
class Valid(Generic[T]):
    value: T


@dataclass(frozen=True)
class Invalid:
    issues: list[Issue] = field(default_factory=list)

    @property
    def summary(self) -> str:
        return "; ".join(str(issue) for issue in self.issues) or "invalid output"


Verdict = Union[Valid, Invalid]


@runtime_checkable
class Contract(Protocol):
    """Validator/normalizer for a stage's output. Treated as a black box."""

    def validate(self, candidate: Any) -> Verdict:
        ...


def issues_from_error(error: ValidationError) -> list[Issue]:
    return [
        Issue(path=".".join(str(part) for part in err["loc"]), message=err["msg"])
        for err in error.errors()
    ]


class ModelContract(Generic[M]):
    """Contract backed by a pydantic model.

    Accepts dicts or model instances; valid candidates are normalized to the
    model type.
    """

    def __init__(self, model: Type[M]):
        self.model = model

    def validate(self, candidate: Any) -> Verdict:
        if isinstance(candidate, self.model):
            candidate = candidate.model_dump()
        try:
            return Valid(self.model.model_validate(candidate))
        except ValidationError as e:
            return Invalid(issues_from_error(e))


NonEmptyText = Annotated[str, StringConstraints(min_length=1)]


class TextContract:
    """Contract for non-empty text output (Markdown artifacts)."""

    _adapter = TypeAdapter(NonEmptyText)

    def validate(self, candidate: Any) -> Verdict:
        try:
            return Valid(self._adapter.validate_python(candidate, strict=True))
        except ValidationError as e:
            return Invalid(issues_from_error(e))
