"""Output contracts of the built-in pipeline stages."""

from enum import Enum

from pydantic import BaseModel, Field

from workpacket.models.document import Chunk, SourceRef


class IngestOutput(BaseModel):
    chunks: list[Chunk] = Field(min_length=1)


class RequirementType(str, Enum):
    FUNCTIONAL = "functional"
    CONSTRAINT = "constraint"
    INTERFACE = "interface"
    GRADING = "grading"


class Requirement(BaseModel):
    id: str = Field(min_length=1)
    text: str = Field(min_length=1)
    type: RequirementType
    source_ref: SourceRef


class RequirementsOutput(BaseModel):
    requirements: list[Requirement] = Field(min_length=1)


class Concept(BaseModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    requirement_ids: list[str] = Field(min_length=1)
    source_refs: list[SourceRef] = Field(min_length=1)


class ConceptsOutput(BaseModel):
    concepts: list[Concept] = Field(min_length=1)
