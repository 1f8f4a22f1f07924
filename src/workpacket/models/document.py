"""Core data models for discovered documents and their chunks."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, model_validator


@dataclass(frozen=True)
class SourceDocument:
    """A supported file found during discovery.

    ``file_id`` is stable across runs: the basename for a file given directly,
    otherwise the POSIX path relative to the directory root it was found under.
    """

    file_id: str
    path: Path
    content: str

    @property
    def extension(self) -> str:
        return self.path.suffix.lower()


class FileTag(str, Enum):
    """Coarse category of a source file, used to bias retrieval."""

    SPEC = "spec"
    SLIDES = "slides"
    CODE = "code"
    NOTES = "notes"
    OTHER = "other"


class SourceRef(BaseModel):
    """Pointer back into an original document."""

    model_config = ConfigDict(frozen=True)

    file_id: str = Field(min_length=1)
    page: Optional[PositiveInt] = None
    section: Optional[str] = None
    line_start: Optional[PositiveInt] = None
    line_end: Optional[PositiveInt] = None

    @model_validator(mode="after")
    def _require_locator(self) -> "SourceRef":
        if self.page is None and self.section is None and self.line_start is None:
            raise ValueError(
                "SourceRef must include at least one locator (page, section, or line_start)"
            )
        return self


class Chunk(BaseModel):
    """An addressable unit of source text with exact provenance."""

    model_config = ConfigDict(frozen=True)

    chunk_id: str = Field(min_length=1)
    file_id: str = Field(min_length=1)
    text: str = Field(min_length=1)
    source_ref: SourceRef
