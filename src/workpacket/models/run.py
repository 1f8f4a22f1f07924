"""Run configuration and durable run state."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


def utc_now() -> str:
    """ISO-8601 UTC timestamp with a trailing Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class RunConfig(BaseModel):
    """Inputs for one pipeline run."""

    assignment_id: str = Field(min_length=1)
    input_paths: list[str] = Field(min_length=1)
    output_dir: str = Field(min_length=1)


class RunStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class RunMetadata(BaseModel):
    """Progress record persisted to run.json after every mutation.

    ``stages_completed`` only ever grows, and ``status`` leaves RUNNING at
    most once. ``artifacts`` maps each completed stage to the file it wrote.
    """

    run_id: str = Field(min_length=1)
    assignment_id: str = Field(min_length=1)
    started_at: str
    completed_at: Optional[str] = None
    stages_completed: list[str] = Field(default_factory=list)
    status: RunStatus = RunStatus.RUNNING
    error: Optional[str] = None
    artifacts: dict[str, str] = Field(default_factory=dict)

    def record_stage(self, name: str, artifact: str) -> None:
        self.stages_completed.append(name)
        self.artifacts[name] = artifact

    def complete(self) -> None:
        self._leave_running(RunStatus.COMPLETED)
        self.completed_at = utc_now()

    def fail(self, error: str) -> None:
        self._leave_running(RunStatus.FAILED)
        self.error = error

    def _leave_running(self, status: RunStatus) -> None:
        if self.status is not RunStatus.RUNNING:
            raise RuntimeError(f"Run {self.run_id} already {self.status.value}")
        self.status = status
