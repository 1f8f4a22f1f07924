"""Chunking strategies, selected by file extension."""

from pathlib import Path

from workpacket.chunkers.base import make_chunk_id
from workpacket.chunkers.heading_chunker import HeadingChunker
from workpacket.chunkers.paragraph_chunker import ParagraphChunker
from workpacket.protocols import ChunkingStrategy
from workpacket.utils.files import HEADING_EXTENSIONS

_HEADING = HeadingChunker()
_PARAGRAPH = ParagraphChunker()


def get_chunker(path: Path | str) -> ChunkingStrategy:
    """Heading-delimited for Markdown, paragraph-delimited for everything else."""
    if Path(path).suffix.lower() in HEADING_EXTENSIONS:
        return _HEADING
    return _PARAGRAPH


__all__ = ["HeadingChunker", "ParagraphChunker", "get_chunker", "make_chunk_id"]
