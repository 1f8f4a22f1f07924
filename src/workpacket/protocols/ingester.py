"""Protocol for input root handlers."""

from pathlib import Path
from typing import Iterator, Protocol, runtime_checkable

from workpacket.models import SourceDocument


@runtime_checkable
class Ingester(Protocol):
    """Protocol for input root handlers.

    Each implementation handles one kind of root (a single file, a folder).
    Uses structural subtyping - no inheritance required.
    """

    @property
    def source_type(self) -> str:
        """Return identifier for this root type (e.g., 'file', 'folder')."""
        ...

    def can_handle(self, source: Path) -> bool:
        """Check if this ingester can process the given root."""
        ...

    def ingest(self, source: Path) -> Iterator[SourceDocument]:
        """Yield supported documents under the root."""
        ...
