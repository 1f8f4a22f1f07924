"""Data models for workpacket."""

from workpacket.models.document import Chunk, FileTag, SourceDocument, SourceRef
from workpacket.models.outputs import (
    Concept,
    ConceptsOutput,
    IngestOutput,
    Requirement,
    RequirementsOutput,
    RequirementType,
)
from workpacket.models.run import RunConfig, RunMetadata, RunStatus, utc_now

__all__ = [
    "Chunk",
    "Concept",
    "ConceptsOutput",
    "FileTag",
    "IngestOutput",
    "Requirement",
    "RequirementsOutput",
    "RequirementType",
    "RunConfig",
    "RunMetadata",
    "RunStatus",
    "SourceDocument",
    "SourceRef",
    "utc_now",
]
