"""CLI entry point for workpacket."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from pydantic import ValidationError

from workpacket.config import get_settings
from workpacket.exceptions import WorkpacketError
from workpacket.generators import OpenAIGenerator
from workpacket.models import FileTag, RunConfig, RunMetadata, RunStatus
from workpacket.pipeline import read_run_metadata, run_pipeline
from workpacket.query_builder import build_query
from workpacket.stages import default_stages, ingest_stages
from workpacket.storage import open_index

logger = logging.getLogger(__name__)


def make_config(assignment_dir: str, output_dir: Optional[str]) -> RunConfig:
    """Build and validate the run configuration for an assignment folder."""
    assignment_path = Path(assignment_dir).resolve()
    if not assignment_path.exists():
        raise WorkpacketError(f"Assignment directory does not exist: {assignment_path}")

    assignment_id = assignment_path.name
    if output_dir:
        out = Path(output_dir).resolve()
    else:
        out = (Path(get_settings().runs_dir) / assignment_id).resolve()

    return RunConfig(
        assignment_id=assignment_id,
        input_paths=[str(assignment_path)],
        output_dir=str(out),
    )


def report(metadata: RunMetadata, output_dir: str) -> int:
    """Print the outcome of a run and return the process exit code."""
    logger.info("")
    if metadata.status is RunStatus.COMPLETED:
        logger.info(f"Completed {len(metadata.stages_completed)} stages -> {output_dir}")
        return 0

    logger.error(f"Run failed: {metadata.error}")
    if metadata.stages_completed:
        logger.error(f"Completed stages: {', '.join(metadata.stages_completed)}")
    for name in metadata.artifacts.values():
        logger.error(f"  {Path(output_dir) / name}")
    logger.error(f"Audit log: {Path(output_dir) / 'run.log'}")
    return 1


def build(assignment_dir: str, output_dir: Optional[str] = None) -> int:
    """Run the full pipeline for an assignment folder.

    Args:
        assignment_dir: Folder holding the assignment materials
        output_dir: Run directory (default: <runs_dir>/<assignment_id>)
    """
    config = make_config(assignment_dir, output_dir)
    logger.info(f"Building packet for '{config.assignment_id}' -> {config.output_dir}")
    metadata = run_pipeline(config, default_stages(), generator=OpenAIGenerator())
    return report(metadata, config.output_dir)


def ingest(assignment_dir: str, output_dir: Optional[str] = None) -> int:
    """Chunk and index an assignment folder without calling any model."""
    config = make_config(assignment_dir, output_dir)
    logger.info(f"Ingesting '{config.assignment_id}' -> {config.output_dir}")
    metadata = run_pipeline(config, ingest_stages())
    return report(metadata, config.output_dir)


def query(
    output_dir: str,
    text: str,
    bias: Optional[str] = None,
    limit: Optional[int] = None,
    raw: bool = False,
) -> int:
    """Search a run's content index.

    Args:
        output_dir: Run directory holding chunks.db
        text: Free text, compiled to an OR query unless raw is set
        bias: Boost chunks from files with this tag
        limit: Maximum number of results
        raw: Pass text to the index as an FTS5 expression
    """
    index = open_index(output_dir)
    expression = text if raw else build_query([text])
    if not expression:
        logger.error("Query has no significant terms")
        return 1

    chunks = index.query(expression, limit=limit, bias=bias)
    if not chunks:
        print(f"No results for: {expression}")
        return 0

    for i, chunk in enumerate(chunks, 1):
        ref = chunk.source_ref
        snippet = chunk.text[:200].replace("\n", " ")
        if len(chunk.text) > 200:
            snippet += "..."
        print(f"{i}. {chunk.chunk_id}  {ref.file_id}:{ref.line_start}-{ref.line_end}")
        print(f"   {snippet}")
        print()
    return 0


def info(output_dir: str) -> int:
    """Show information about a run directory."""
    out = Path(output_dir)
    index = open_index(out)
    files = index.list_files()

    print(f"Run: {out}")
    run_json = out / "run.json"
    if run_json.exists():
        metadata = read_run_metadata(out)
        print(f"  Status: {metadata.status.value}")
        print(f"  Stages: {', '.join(metadata.stages_completed) or '-'}")
        if metadata.error:
            print(f"  Error: {metadata.error}")
    print(f"")
    print(f"Index:")
    for key in ["assignment_id", "source", "created_at"]:
        value = index.get_metadata(key)
        if value:
            print(f"  {key}: {value}")
    print(f"  Files: {len(files)}")
    print(f"  Chunks: {index.count_chunks()}")
    for tag in FileTag:
        count = sum(1 for f in files if f["tag"] == tag.value)
        if count:
            print(f"    {tag.value}: {count} files")
    return 0


def serve(output_dir: str, transport: str = "stdio") -> int:
    """Start an MCP server over a run's content index."""
    # Import here to avoid loading MCP unless needed
    from typing import Literal, cast

    from workpacket.server import create_mcp_server

    index = open_index(output_dir)
    logger.info(f"Serving {index.path} via {transport}")
    mcp = create_mcp_server(index)
    mcp.run(transport=cast(Literal["stdio", "sse", "streamable-http"], transport))
    return 0


def deck() -> int:
    """Launch the Flight Deck TUI for interactive ingestion and retrieval."""
    from workpacket.flight_deck import main as flight_deck_main

    flight_deck_main()
    return 0


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="workpacket",
        description="workpacket - cite-able chunks and validated generation runs",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("build", "Run the full pipeline for an assignment folder"),
        ("ingest", "Chunk and index an assignment folder"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("assignment_dir", help="Folder with the assignment materials")
        sub.add_argument(
            "-o",
            "--output",
            default=None,
            help="Run directory (default: <runs_dir>/<assignment_id>)",
        )

    query_parser = subparsers.add_parser("query", help="Search a run's content index")
    query_parser.add_argument("output_dir", help="Run directory")
    query_parser.add_argument("text", nargs="+", help="Search text")
    query_parser.add_argument(
        "--bias",
        choices=[tag.value for tag in FileTag],
        default=None,
        help="Boost chunks from files with this tag",
    )
    query_parser.add_argument("--limit", type=int, default=None, help="Maximum results")
    query_parser.add_argument(
        "--raw",
        action="store_true",
        help="Treat text as an FTS5 expression instead of free text",
    )

    info_parser = subparsers.add_parser("info", help="Show information about a run")
    info_parser.add_argument("output_dir", help="Run directory")

    serve_parser = subparsers.add_parser("serve", help="Start MCP server for a run's index")
    serve_parser.add_argument("output_dir", help="Run directory")
    serve_parser.add_argument(
        "--transport",
        choices=["stdio", "sse"],
        default="stdio",
        help="Transport protocol (default: stdio)",
    )

    subparsers.add_parser("deck", help="Launch Flight Deck TUI for interactive testing")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main CLI entry point."""
    args = create_parser().parse_args(argv)
    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(message)s",
    )

    try:
        if args.command == "build":
            code = build(args.assignment_dir, args.output)
        elif args.command == "ingest":
            code = ingest(args.assignment_dir, args.output)
        elif args.command == "query":
            code = query(args.output_dir, " ".join(args.text), args.bias, args.limit, args.raw)
        elif args.command == "info":
            code = info(args.output_dir)
        elif args.command == "serve":
            code = serve(args.output_dir, args.transport)
        else:
            code = deck()
    except (WorkpacketError, ValidationError) as e:
        logger.error(f"Error: {e}")
        code = 1

    sys.exit(code)


if __name__ == "__main__":
    main()
