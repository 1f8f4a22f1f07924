"""Protocol for text chunking strategies."""

from typing import Protocol, runtime_checkable

from workpacket.models import Chunk


@runtime_checkable
class ChunkingStrategy(Protocol):
    """Protocol for text chunking strategies.

    Implementations must report line ranges such that joining the source
    lines ``[line_start - 1, line_end)`` with newlines yields the chunk text.
    """

    def chunk(self, text: str, file_id: str) -> list[Chunk]:
        """Split text into chunks with source refs."""
        ...
