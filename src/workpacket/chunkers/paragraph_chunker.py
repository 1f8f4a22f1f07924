"""Paragraph-based chunking strategy."""

from workpacket.chunkers.base import is_blank, make_chunk
from workpacket.models import Chunk


class ParagraphChunker:
    """Split plain text on blank lines.

    Each run of non-blank lines becomes one chunk. Consecutive blank lines
    collapse into a single separator, and blank lines never enter a chunk's
    text or line range.
    """

    def chunk(self, text: str, file_id: str) -> list[Chunk]:
        """Split text into chunks with line-range source refs.

        Args:
            text: The file content to chunk
            file_id: Stable identifier of the source file

        Returns:
            Chunks in file order; empty for whitespace-only text
        """
        if not text or not text.strip():
            return []

        chunks: list[Chunk] = []
        paragraph: list[str] = []
        start = 0

        for i, line in enumerate(text.split("\n")):
            if is_blank(line):
                if paragraph:
                    chunks.append(make_chunk(file_id, len(chunks), paragraph, start))
                    paragraph = []
                continue

            if not paragraph:
                start = i
            paragraph.append(line)

        if paragraph:
            chunks.append(make_chunk(file_id, len(chunks), paragraph, start))

        return chunks
