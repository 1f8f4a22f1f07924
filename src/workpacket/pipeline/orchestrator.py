"""Sequential stage runner with validate-then-persist and bounded retry."""

import logging
import uuid
from pathlib import Path
from typing import Any, Optional, Sequence

from workpacket.config import Settings, get_settings
from workpacket.models import RunConfig, RunMetadata, utc_now
from workpacket.pipeline.audit import AuditLog
from workpacket.pipeline.contracts import Fatal, Invalid, as_outcome
from workpacket.pipeline.persistence import (
    AUDIT_LOG_FILENAME,
    to_json,
    write_atomic,
    write_run_metadata,
)
from workpacket.pipeline.stage import ArtifactFormat, RunContext, Stage
from workpacket.protocols import GenerationClient

logger = logging.getLogger(__name__)

MAX_RETRIES = 2  # 3 attempts per stage in total
MAX_ATTEMPTS = MAX_RETRIES + 1


class _StageFailed(Exception):
    """Internal signal: the current stage ended the run."""


class PipelineRun:
    """State of one run: metadata, audit log and context.

    ``run.json`` is rewritten after every metadata mutation, so the file on
    disk always reflects the last transition even if the process dies.
    """

    def __init__(
        self,
        config: RunConfig,
        generator: Optional[GenerationClient] = None,
        settings: Optional[Settings] = None,
        run_id: Optional[str] = None,
    ):
        self.output_dir = Path(config.output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        run_id = run_id or str(uuid.uuid4())
        self.metadata = RunMetadata(
            run_id=run_id,
            assignment_id=config.assignment_id,
            started_at=utc_now(),
        )
        self.context = RunContext(
            config=config,
            run_id=run_id,
            generator=generator,
            settings=settings or get_settings(),
        )
        self.audit = AuditLog(self.output_dir / AUDIT_LOG_FILENAME, run_id)
        self.persist()

    def persist(self) -> None:
        write_run_metadata(self.output_dir, self.metadata)

    def fail(self, error: str) -> None:
        self.metadata.fail(error)
        self.persist()
        artifacts = ", ".join(
            str(self.output_dir / name) for name in self.metadata.artifacts.values()
        )
        self.audit.log(f"Pipeline failed: {error}", logging.ERROR)
        self.audit.log(f"Artifacts produced so far: {artifacts or 'none'}")

    def abort(self, stage: Stage, what: str, reason: str) -> "_StageFailed":
        """Record a stage-ending fault and return the signal to raise."""
        self.audit.log(f"Stage '{stage.name}' {what}: {reason}", logging.ERROR)
        self.fail(reason)
        return _StageFailed(reason)

    def execute(self, stage: Stage, stage_input: Any) -> Any:
        """Run one stage to a validated value, retrying contract failures.

        Raises _StageFailed after recording the failure in the metadata.
        """
        for attempt in range(1, MAX_ATTEMPTS + 1):
            try:
                outcome = as_outcome(stage.run(stage_input, self.context))
            except Exception as e:
                outcome = Fatal(str(e) or type(e).__name__)

            if isinstance(outcome, Fatal):
                raise self.abort(stage, "fatal error", outcome.reason)

            try:
                verdict = stage.contract.validate(outcome.value)
            except Exception as e:
                raise self.abort(stage, "contract check raised", str(e) or type(e).__name__) from e

            if not isinstance(verdict, Invalid):
                return verdict.value

            if attempt == MAX_ATTEMPTS:
                self.audit.log(
                    f"Stage '{stage.name}' output validation failed after {attempt} attempts",
                    logging.ERROR,
                )
                self.fail(verdict.summary)
                raise _StageFailed(verdict.summary)

            self.audit.log(
                f"Stage '{stage.name}' output validation failed "
                f"(attempt {attempt}/{MAX_ATTEMPTS}), retrying: {verdict.summary}",
                logging.WARNING,
            )

        raise AssertionError("unreachable")

    def store(self, stage: Stage, value: Any) -> None:
        """Write the stage artifact, then record the stage as completed."""
        if stage.format is ArtifactFormat.TEXT and not isinstance(value, str):
            raise self.abort(
                stage,
                "wrong artifact type",
                f"Stage '{stage.name}' output must be a string for text artifact "
                f"'{stage.artifact}', got {type(value).__name__}",
            )

        try:
            content = to_json(value) if stage.format is ArtifactFormat.JSON else value
            write_atomic(self.output_dir / stage.artifact, content)
        except Exception as e:
            raise self.abort(
                stage,
                "artifact write failed",
                f"Could not write '{stage.artifact}': {str(e) or type(e).__name__}",
            ) from e

        self.metadata.record_stage(stage.name, stage.artifact)
        self.persist()
        self.audit.log(f"Stage '{stage.name}' completed, output written to {stage.artifact}")


def run_pipeline(
    config: RunConfig,
    stages: Sequence[Stage],
    initial_input: Any = None,
    *,
    generator: Optional[GenerationClient] = None,
    settings: Optional[Settings] = None,
    run_id: Optional[str] = None,
) -> RunMetadata:
    """Run ``stages`` in order, feeding each validated output to the next.

    A stage that raises or returns ``Fatal`` ends the run at once. A stage
    whose candidate fails its contract is re-run up to ``MAX_RETRIES``
    times. Artifacts of stages that completed before a failure stay on disk
    and in ``stages_completed``.

    Returns the final run metadata (also persisted as run.json).
    """
    run = PipelineRun(config, generator=generator, settings=settings, run_id=run_id)
    try:
        run.audit.log(
            f"Pipeline started for assignment '{config.assignment_id}' "
            f"with {len(stages)} stages (run {run.metadata.run_id})"
        )

        current = initial_input
        for stage in stages:
            run.audit.log(f"Stage '{stage.name}' started")
            try:
                value = run.execute(stage, current)
                run.store(stage, value)
            except _StageFailed:
                return run.metadata
            current = value

        run.metadata.complete()
        run.persist()
        run.audit.log("Pipeline completed successfully")
        return run.metadata
    finally:
        run.audit.close()
