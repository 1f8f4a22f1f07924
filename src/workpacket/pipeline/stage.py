"""Stage definitions and the per-run context threaded through them."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional

from workpacket.config import Settings, get_settings
from workpacket.exceptions import GeneratorUnavailableError
from workpacket.models import RunConfig
from workpacket.pipeline.contracts import Contract
from workpacket.protocols import GenerationClient
from workpacket.storage import ContentIndex, open_index


class ArtifactFormat(str, Enum):
    JSON = "json"
    TEXT = "text"


@dataclass
class RunContext:
    """Configuration and collaborator handles shared by every stage of a run."""

    config: RunConfig
    run_id: str
    generator: Optional[GenerationClient] = None
    settings: Settings = field(default_factory=get_settings)
    _index: Optional[ContentIndex] = field(default=None, repr=False)

    @property
    def output_dir(self) -> Path:
        return Path(self.config.output_dir)

    @property
    def index(self) -> ContentIndex:
        """The run's content index, opened on first use.

        Raises IndexNotFoundError if no stage has built one yet.
        """
        if self._index is None:
            self._index = open_index(self.output_dir)
        return self._index

    def attach_index(self, index: ContentIndex) -> None:
        self._index = index

    def require_generator(self, stage: str) -> GenerationClient:
        if self.generator is None:
            raise GeneratorUnavailableError(f"{stage} stage requires a generation client")
        return self.generator


StageRun = Callable[[Any, RunContext], Any]


@dataclass(frozen=True)
class Stage:
    """One pipeline step.

    ``run`` receives the previous stage's validated output and the run
    context, and returns a ``StageOutcome`` (a bare value counts as a
    Candidate). Raising is equivalent to returning ``Fatal``.
    """

    name: str
    run: StageRun
    contract: Contract
    artifact: str
    artifact_format: Optional[ArtifactFormat] = None

    @property
    def format(self) -> ArtifactFormat:
        if self.artifact_format is not None:
            return self.artifact_format
        if Path(self.artifact).suffix.lower() == ".json":
            return ArtifactFormat.JSON
        return ArtifactFormat.TEXT
