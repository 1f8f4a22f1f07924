"""Heading-based chunking strategy for Markdown."""

import re
from typing import Optional

from workpacket.chunkers.base import is_blank, make_chunk
from workpacket.models import Chunk

HEADING = re.compile(r"^(#{1,6})\s+(.*?)\s*#*\s*$")
FENCE = re.compile(r"^(`{3,}|~{3,})")


class HeadingChunker:
    """Split Markdown on headings, ignoring headings inside fenced code.

    Each heading and the lines under it form one chunk; anything before the
    first heading becomes a preamble chunk. Leading and trailing blank lines
    of a block are dropped from both its text and its line range.
    """

    def chunk(self, text: str, file_id: str) -> list[Chunk]:
        """Split text into chunks with line-range and section source refs.

        Args:
            text: The Markdown content to chunk
            file_id: Stable identifier of the source file

        Returns:
            Chunks in file order; empty for whitespace-only text
        """
        if not text or not text.strip():
            return []

        chunks: list[Chunk] = []
        block: list[str] = []
        block_start = 0
        section: Optional[str] = None
        in_fence = False

        for i, line in enumerate(text.split("\n")):
            if FENCE.match(line):
                in_fence = not in_fence
                block.append(line)
                continue

            heading = None if in_fence else HEADING.match(line)
            if heading and block:
                self._flush(chunks, file_id, block, block_start, section)
                block, block_start = [], i
            if heading:
                section = heading.group(2) or heading.group(1)
            block.append(line)

        if block:
            self._flush(chunks, file_id, block, block_start, section)

        return chunks

    @staticmethod
    def _flush(
        chunks: list[Chunk],
        file_id: str,
        block: list[str],
        block_start: int,
        section: Optional[str],
    ) -> None:
        first = 0
        while first < len(block) and is_blank(block[first]):
            first += 1
        if first == len(block):
            return

        last = len(block) - 1
        while is_blank(block[last]):
            last -= 1

        chunks.append(
            make_chunk(
                file_id,
                len(chunks),
                block[first : last + 1],
                block_start + first,
                section=section,
            )
        )
