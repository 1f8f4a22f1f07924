"""Stage orchestration: outcomes, contracts, run context and the runner."""

from workpacket.pipeline.contracts import (
    Candidate,
    Contract,
    Fatal,
    Invalid,
    Issue,
    ModelContract,
    StageOutcome,
    TextContract,
    Valid,
)
from workpacket.pipeline.orchestrator import MAX_ATTEMPTS, MAX_RETRIES, run_pipeline
from workpacket.pipeline.persistence import (
    AUDIT_LOG_FILENAME,
    RUN_METADATA_FILENAME,
    read_run_metadata,
)
from workpacket.pipeline.stage import ArtifactFormat, RunContext, Stage

__all__ = [
    "AUDIT_LOG_FILENAME",
    "ArtifactFormat",
    "Candidate",
    "Contract",
    "Fatal",
    "Invalid",
    "Issue",
    "MAX_ATTEMPTS",
    "MAX_RETRIES",
    "ModelContract",
    "RUN_METADATA_FILENAME",
    "RunContext",
    "Stage",
    "StageOutcome",
    "TextContract",
    "Valid",
    "read_run_metadata",
    "run_pipeline",
]
