"""Flight Deck - a TUI for exercising ingestion and retrieval by hand."""

from __future__ import annotations

import shutil
import tempfile
from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical
from textual.message import Message
from textual.widgets import (
    Button,
    DataTable,
    DirectoryTree,
    Footer,
    Header,
    Input,
    Label,
    Log,
    Rule,
    Select,
    Static,
)

from workpacket.corpus import build_corpus
from workpacket.exceptions import WorkpacketError
from workpacket.models import Chunk, FileTag
from workpacket.query_builder import build_query
from workpacket.storage import DB_FILENAME, ContentIndex


@dataclass
class IngestStats:
    """Statistics tracked during an ingestion run."""

    files_discovered: int = 0
    files_processed: int = 0
    chunks_created: int = 0
    total_bytes: int = 0
    tags: dict[str, int] = field(default_factory=dict)
    status: str = "idle"
    start_time: datetime | None = None
    end_time: datetime | None = None

    @property
    def elapsed(self) -> str:
        if not self.start_time:
            return "00:00"
        end = self.end_time or datetime.now()
        minutes, seconds = divmod(int((end - self.start_time).total_seconds()), 60)
        return f"{minutes:02d}:{seconds:02d}"

    def copy(self) -> "IngestStats":
        return replace(self, tags=dict(self.tags))


class StatsPanel(Static):
    """Real-time statistics display."""

    def compose(self) -> ComposeResult:
        yield Static(id="stats-content")

    def on_mount(self) -> None:
        self.update_display(IngestStats())

    def update_display(self, stats: IngestStats) -> None:
        status_color = {
            "idle": "dim",
            "running": "green",
            "complete": "cyan",
            "error": "red",
        }.get(stats.status, "white")
        tag_lines = "\n".join(
            f"  {tag.value:<10}  [blue]{stats.tags.get(tag.value, 0):,}[/]" for tag in FileTag
        )

        self.query_one("#stats-content", Static).update(f"""[b]STATUS[/b]  [{status_color}]{stats.status.upper()}[/]

[b]TIME[/b]    {stats.elapsed}

[b]FILES[/b]
  Discovered  [cyan]{stats.files_discovered:,}[/]
  Processed   [green]{stats.files_processed:,}[/]
  Chunks      [magenta]{stats.chunks_created:,}[/]
  Size        [cyan]{stats.total_bytes / 1024:.1f} KB[/]

[b]TAGS[/b]
{tag_lines}""")


class FileLogTable(DataTable):
    """Per-file ingestion results."""

    def on_mount(self) -> None:
        self.add_columns("File", "Tag", "Chunks", "Size")
        self.cursor_type = "row"

    def add_file(self, file_id: str, tag: str, chunks: int, size: int) -> None:
        size_str = f"{size / 1024:.1f}KB" if size >= 1024 else f"{size}B"
        display_name = file_id if len(file_id) <= 40 else "..." + file_id[-37:]
        self.add_row(display_name, tag, f"[magenta]{chunks}[/]", size_str)
        self.scroll_end()


class ResultsTable(DataTable):
    """Ranked retrieval results."""

    def on_mount(self) -> None:
        self.add_columns("#", "Chunk", "Source", "Text")
        self.cursor_type = "row"

    def show(self, chunks: list[Chunk]) -> None:
        self.clear()
        for i, chunk in enumerate(chunks, 1):
            ref = chunk.source_ref
            text = chunk.text.replace("\n", " ")
            self.add_row(
                str(i),
                chunk.chunk_id,
                f"{ref.file_id}:{ref.line_start}-{ref.line_end}",
                text if len(text) <= 60 else text[:57] + "...",
            )


class FlightDeck(App):
    """The workpacket Flight Deck."""

    class StatsUpdated(Message):
        def __init__(self, stats: IngestStats) -> None:
            self.stats = stats
            super().__init__()

    class LogMessage(Message):
        def __init__(self, message: str) -> None:
            self.message = message
            super().__init__()

    class FileProcessed(Message):
        def __init__(self, file_id: str, tag: str, chunks: int, size: int) -> None:
            self.file_id = file_id
            self.tag = tag
            self.chunks = chunks
            self.size = size
            super().__init__()

    class IndexReady(Message):
        def __init__(self, index: ContentIndex) -> None:
            self.index = index
            super().__init__()

    CSS = """
    #main-container {
        layout: horizontal;
        height: 100%;
    }

    #left-panel {
        width: 35;
        background: $surface-darken-1;
        border-right: solid $primary-darken-2;
        padding: 1;
    }

    #center-panel {
        width: 1fr;
        padding: 1;
    }

    #right-panel {
        width: 30;
        background: $surface-darken-1;
        border-left: solid $primary-darken-2;
        padding: 1;
    }

    StatsPanel {
        height: auto;
        padding: 1;
        background: $surface-darken-2;
        border: round $primary;
        margin-bottom: 1;
    }

    #action-buttons, #query-bar {
        layout: horizontal;
        height: 3;
        margin-bottom: 1;
    }

    #query-input {
        width: 1fr;
    }

    #bias-select {
        width: 16;
    }

    FileLogTable, ResultsTable {
        height: 1fr;
        border: round $primary-darken-1;
    }

    #log-panel {
        height: 8;
        border: round $primary-darken-2;
        background: $surface-darken-2;
    }

    .section-title {
        text-style: bold;
        margin-bottom: 1;
    }

    DirectoryTree {
        height: 100%;
        border: round $primary-darken-1;
    }
    """

    BINDINGS = [
        Binding("i", "ingest", "Ingest", show=True),
        Binding("c", "clear", "Clear", show=True),
        Binding("q", "quit", "Quit", show=True),
    ]

    TITLE = "workpacket Flight Deck"
    SUB_TITLE = "Ingestion & Retrieval Console"

    def __init__(self) -> None:
        super().__init__()
        self.index: ContentIndex | None = None
        self.workdir = Path(tempfile.mkdtemp(prefix="workpacket-deck-"))

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Container(id="main-container"):
            with Vertical(id="left-panel"):
                yield Label("MISSION CONTROL", classes="section-title")
                yield StatsPanel()
                yield Rule()
                yield Label("Source Path")
                yield Input(placeholder="Enter file or folder path...", id="source-input")
                with Horizontal(id="action-buttons"):
                    yield Button("INGEST", id="ingest-btn", variant="success")
                    yield Button("Clear", id="clear-btn", variant="warning")

            with Vertical(id="center-panel"):
                yield Label("FILES", classes="section-title")
                yield FileLogTable(id="file-log")
                yield Label("RETRIEVAL", classes="section-title")
                with Horizontal(id="query-bar"):
                    yield Input(placeholder="Free-text query, Enter to search", id="query-input")
                    yield Select(
                        [(tag.value, tag.value) for tag in FileTag],
                        prompt="bias",
                        id="bias-select",
                    )
                yield ResultsTable(id="results")
                yield Log(id="log-panel", highlight=True, auto_scroll=True)

            with Vertical(id="right-panel"):
                yield Label("FILE BROWSER", classes="section-title")
                yield DirectoryTree(Path.cwd(), id="dir-tree")

        yield Footer()

    def on_mount(self) -> None:
        self._log("Flight Deck initialized")
        self._log("Enter a source path and press INGEST to begin")

    def _log(self, message: str) -> None:
        timestamp = datetime.now().strftime("%H:%M:%S")
        self.query_one("#log-panel", Log).write_line(f"[{timestamp}] {message}")

    def on_flight_deck_stats_updated(self, event: StatsUpdated) -> None:
        self.query_one(StatsPanel).update_display(event.stats)

    def on_flight_deck_log_message(self, event: LogMessage) -> None:
        self._log(event.message)

    def on_flight_deck_file_processed(self, event: FileProcessed) -> None:
        self.query_one("#file-log", FileLogTable).add_file(
            event.file_id, event.tag, event.chunks, event.size
        )

    def on_flight_deck_index_ready(self, event: IndexReady) -> None:
        self.index = event.index

    def on_directory_tree_file_selected(self, event: DirectoryTree.FileSelected) -> None:
        self.query_one("#source-input", Input).value = str(event.path)

    def on_directory_tree_directory_selected(self, event: DirectoryTree.DirectorySelected) -> None:
        self.query_one("#source-input", Input).value = str(event.path)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "ingest-btn":
            self.action_ingest()
        elif event.button.id == "clear-btn":
            self.action_clear()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "query-input":
            self.run_query(event.value)
        elif event.input.id == "source-input":
            self.action_ingest()

    def run_query(self, text: str) -> None:
        if self.index is None:
            self._log("[red]ERROR: Ingest a source first[/]")
            return

        bias = self.query_one("#bias-select", Select).value
        tag = FileTag(bias) if isinstance(bias, str) else None
        expression = build_query([text])
        chunks = self.index.query(expression, bias=tag)
        if not chunks and tag is not None:
            chunks = self.index.by_tag(tag)
            self._log(f"No keyword matches, showing '{tag.value}' chunks")
        self.query_one("#results", ResultsTable).show(chunks)
        self._log(f"{len(chunks)} results for: {expression or '(no significant terms)'}")

    def action_clear(self) -> None:
        self.query_one(StatsPanel).update_display(IngestStats())
        self.query_one("#file-log", FileLogTable).clear()
        self.query_one("#results", ResultsTable).clear()
        self.query_one("#log-panel", Log).clear()
        self.index = None
        self._log("Cleared - ready for new run")

    def action_ingest(self) -> None:
        source = self.query_one("#source-input", Input).value.strip()
        if not source:
            self._log("[red]ERROR: No source path specified[/]")
            return
        self.run_ingest(source)

    @work(exclusive=True, thread=True)
    def run_ingest(self, source: str) -> None:
        """Discover, chunk, tag and index a source in a background thread."""
        stats = IngestStats(status="running", start_time=datetime.now())
        self.post_message(self.StatsUpdated(stats.copy()))
        self.post_message(self.LogMessage(f"Scanning source: {source}"))

        try:
            corpus = build_corpus([source])
        except WorkpacketError as e:
            stats.status = "error"
            self.post_message(self.StatsUpdated(stats.copy()))
            self.post_message(self.LogMessage(f"[red]ERROR: {e}[/]"))
            return

        stats.files_discovered = len(corpus.documents)
        self.post_message(self.LogMessage(f"Found {stats.files_discovered} supported files"))

        for doc in corpus.documents:
            chunks = corpus.chunks_for(doc.file_id)
            tag = corpus.file_tags[doc.file_id]
            size = len(doc.content.encode("utf-8"))
            stats.files_processed += 1
            stats.chunks_created += len(chunks)
            stats.total_bytes += size
            stats.tags[tag.value] = stats.tags.get(tag.value, 0) + 1
            self.post_message(self.StatsUpdated(stats.copy()))
            self.post_message(self.FileProcessed(doc.file_id, tag.value, len(chunks), size))

        index = ContentIndex.build(self.workdir / DB_FILENAME, corpus.chunks, corpus.file_tags)
        self.post_message(self.IndexReady(index))

        stats.status = "complete"
        stats.end_time = datetime.now()
        self.post_message(self.StatsUpdated(stats.copy()))
        self.post_message(
            self.LogMessage(
                f"[cyan]COMPLETE: {stats.files_processed} files, "
                f"{stats.chunks_created} chunks -> {index.path}[/]"
            )
        )


def main() -> None:
    """Run the Flight Deck TUI."""
    app = FlightDeck()
    try:
        app.run()
    finally:
        shutil.rmtree(app.workdir, ignore_errors=True)


if __name__ == "__main__":
    main()
