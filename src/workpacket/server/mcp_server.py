"""FastMCP server implementation over a workpacket content index."""

from typing import Optional

from mcp.server.fastmcp import FastMCP

from workpacket.exceptions import IndexQueryError
from workpacket.models import Chunk, FileTag
from workpacket.query_builder import build_query
from workpacket.storage import ContentIndex


def format_results(chunks: list[Chunk]) -> str:
    lines = []
    for i, chunk in enumerate(chunks, 1):
        ref = chunk.source_ref
        text = chunk.text[:200].replace("\n", " ")
        if len(chunk.text) > 200:
            text += "..."
        lines.append(f"{i}. {chunk.chunk_id} {ref.file_id}:{ref.line_start}-{ref.line_end}")
        lines.append(f"   {text}")
        lines.append("")
    return "\n".join(lines)


def list_files_text(index: ContentIndex, path: str = "") -> str:
    files = index.list_files(path)
    if not files:
        return f"No files found matching '{path}'"
    return "\n".join(f"{f['file_id']:<60} {f['tag']:<8} {f['chunks']:>5} chunks" for f in files)


def search_text(index: ContentIndex, query: str, limit: int = 10, bias: Optional[str] = None) -> str:
    """Keyword search with a tag fallback when nothing matches."""
    try:
        tag = FileTag(bias) if bias else None
    except ValueError:
        return f"Error: unknown tag '{bias}'"

    expression = build_query([query])
    try:
        chunks = index.query(expression, limit=limit, bias=tag)
    except IndexQueryError as e:
        return f"Error: {e}"
    if not chunks and tag is not None:
        chunks = index.by_tag(tag, limit=limit)
    if not chunks:
        return f"No results found for: {query}"
    return format_results(chunks)


def by_tag_text(index: ContentIndex, tag: str, limit: int = 10) -> str:
    try:
        chunks = index.by_tag(FileTag(tag), limit=limit)
    except ValueError:
        return f"Error: unknown tag '{tag}'"
    if not chunks:
        return f"No chunks tagged '{tag}'"
    return format_results(chunks)


def read_chunk_text(index: ContentIndex, chunk_id: str) -> str:
    chunk = index.get_chunk(chunk_id)
    if chunk is None:
        return f"Error: Chunk not found: {chunk_id}"
    return f"[{chunk.source_ref.model_dump_json(exclude_none=True)}]\n{chunk.text}"


def create_mcp_server(index: ContentIndex) -> FastMCP:
    """Create an MCP server for one run's content index.

    Design: 1 process = 1 index. The server only reads; the index is never
    modified after ingestion.

    Args:
        index: The content index to serve

    Returns:
        Configured FastMCP server instance
    """
    mcp = FastMCP(
        name="workpacket",
    )

    @mcp.tool()
    def ls(path: str = "") -> str:
        """List indexed files with their category tag and chunk count.

        Args:
            path: Optional file id prefix to filter results (e.g., "slides/")
        """
        return list_files_text(index, path)

    @mcp.tool()
    def search(query: str, limit: int = 10, bias: Optional[str] = None) -> str:
        """Keyword search across the indexed material.

        The query is free text; significant words are matched with OR. If
        nothing matches and a bias tag is given, chunks from files with that
        tag are returned instead.

        Args:
            query: What you are looking for
            limit: Maximum number of results to return (default: 10)
            bias: Rank chunks from files with this tag first (spec, slides, code, notes, other)
        """
        return search_text(index, query, limit, bias)

    @mcp.tool()
    def by_tag(tag: str, limit: int = 10) -> str:
        """List chunks from files with a category tag, in source order.

        Args:
            tag: One of spec, slides, code, notes, other
            limit: Maximum number of results to return (default: 10)
        """
        return by_tag_text(index, tag, limit)

    @mcp.tool()
    def read_chunk(chunk_id: str) -> str:
        """Read a chunk's full text and its source location.

        Args:
            chunk_id: Chunk id as shown in search results
        """
        return read_chunk_text(index, chunk_id)

    return mcp
