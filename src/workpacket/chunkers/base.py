"""Shared helpers for line-based chunkers."""

from typing import Optional

from workpacket.models import Chunk, SourceRef
from workpacket.utils.files import short_digest

CHUNK_ID_PREFIX = "chunk-"
CHUNK_ID_DIGEST_LENGTH = 12


def make_chunk_id(file_id: str, index: int) -> str:
    """Deterministic, fixed-width id for the ``index``-th chunk of a file."""
    return CHUNK_ID_PREFIX + short_digest(f"{file_id}:{index}", CHUNK_ID_DIGEST_LENGTH)


def is_blank(line: str) -> bool:
    return not line.strip()


def make_chunk(
    file_id: str,
    index: int,
    lines: list[str],
    first_line: int,
    section: Optional[str] = None,
) -> Chunk:
    """Build a chunk from ``lines`` starting at 0-based line ``first_line``.

    The reported range is 1-based and inclusive, so joining the source lines
    ``[line_start - 1, line_end)`` reproduces ``text`` exactly.
    """
    return Chunk(
        chunk_id=make_chunk_id(file_id, index),
        file_id=file_id,
        text="\n".join(lines),
        source_ref=SourceRef(
            file_id=file_id,
            section=section,
            line_start=first_line + 1,
            line_end=first_line + len(lines),
        ),
    )
