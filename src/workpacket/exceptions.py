"""Exception hierarchy for workpacket.

Two disjoint fault classes matter to the orchestrator:

- ``PreconditionError`` and its subclasses are fatal. A stage that raises one
  (or any other exception) ends the run immediately, without retry.
- Contract failures are never raised; a stage signals them by returning a
  candidate that fails its output contract, which the retry loop handles.
"""


class WorkpacketError(Exception):
    """Base exception for workpacket."""


class PreconditionError(WorkpacketError):
    """An unrecoverable precondition fault. Never retried."""


class InputPathNotFoundError(PreconditionError):
    """A configured input path does not exist."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Input path does not exist: {path}")


class NoSupportedFilesError(PreconditionError):
    """Discovery found no files with a supported extension."""


class EmptyCorpusError(PreconditionError):
    """Every discovered file produced zero chunks."""


class MissingArtifactError(PreconditionError):
    """A required upstream artifact is missing or invalid."""


class InvalidStageInputError(PreconditionError):
    """A stage received structurally invalid input from its predecessor."""


class IndexNotFoundError(PreconditionError):
    """No content index exists where one is required."""


class GeneratorUnavailableError(PreconditionError):
    """A stage needs a generation client but the run has none."""


class IndexQueryError(WorkpacketError, ValueError):
    """The content index rejected a query expression."""


class GenerationError(WorkpacketError):
    """The generation collaborator failed to produce a completion."""
