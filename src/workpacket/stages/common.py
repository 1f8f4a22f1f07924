"""Helpers shared by the generation stages."""

import json
import re
from typing import Any, Optional

from workpacket.exceptions import PreconditionError
from workpacket.models import Chunk, FileTag
from workpacket.pipeline import RunContext
from workpacket.protocols import GenerationRequest

_FENCE_OPEN = re.compile(r"^```[a-zA-Z]*\n?")
_FENCE_CLOSE = re.compile(r"\n?```$")


def strip_fences(text: str) -> str:
    """Remove a code fence wrapped around a whole completion."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", cleaned))
    return cleaned


def parse_json(text: str) -> Optional[Any]:
    """Parse a completion as JSON, tolerating fences. None if it isn't JSON."""
    try:
        return json.loads(strip_fences(text))
    except json.JSONDecodeError:
        return None


def describe_locator(chunk: Chunk) -> str:
    ref = chunk.source_ref
    locators = [f"file: {ref.file_id}"]
    if ref.section:
        locators.append(f"section: {ref.section}")
    if ref.line_start is not None:
        locators.append(f"lines: {ref.line_start}-{ref.line_end or ref.line_start}")
    if ref.page is not None:
        locators.append(f"page: {ref.page}")
    return ", ".join(locators)


def format_chunks(chunks: list[Chunk]) -> str:
    """Render chunks for a prompt, each headed by its source locators."""
    return "\n\n".join(
        f"--- Chunk {i} ({describe_locator(chunk)}) ---\n{chunk.text}"
        for i, chunk in enumerate(chunks, 1)
    )


def retrieve(
    ctx: RunContext,
    stage: str,
    query: str,
    bias: FileTag,
    fallback_tag: Optional[FileTag] = None,
) -> list[Chunk]:
    """Query the run's index, falling back to a tag lookup on no matches.

    Raises PreconditionError when nothing at all can be retrieved.
    """
    limit = ctx.settings.retrieval_limit
    chunks = ctx.index.query(query, limit=limit, bias=bias) if query else []
    if not chunks and fallback_tag is not None:
        chunks = ctx.index.by_tag(fallback_tag, limit=limit)
    if not chunks:
        raise PreconditionError(
            f"No chunks retrieved for {stage}. The content index may be empty "
            "or the query may not match any content."
        )
    return chunks


def generate(ctx: RunContext, stage: str, system: str, user: str, max_tokens: Optional[int] = None) -> str:
    """Call the run's generation client and return the completion text.

    Failures of the client propagate and end the run.
    """
    generator = ctx.require_generator(stage)
    return generator.generate(GenerationRequest(system=system, user=user, max_tokens=max_tokens)).text
