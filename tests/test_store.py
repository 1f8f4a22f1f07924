from pathlib import Path

import pytest

from workpacket.chunkers import ParagraphChunker
from workpacket.exceptions import IndexNotFoundError, IndexQueryError
from workpacket.models import FileTag
from workpacket.storage import DB_FILENAME, ContentIndex, open_index


@pytest.fixture
def index(tmp_path: Path) -> ContentIndex:
    chunker = ParagraphChunker()
    chunks = (
        chunker.chunk("The quick brown fox.\n\nA lazy dog sleeps.", "notes.txt")
        + chunker.chunk("The dog must fetch the ball.", "spec.txt")
    )
    return ContentIndex.build(
        tmp_path / DB_FILENAME,
        chunks,
        {"notes.txt": FileTag.NOTES, "spec.txt": FileTag.SPEC},
        metadata={"assignment_id": "hw1"},
    )


def test_query_matches_by_keyword(index: ContentIndex):
    results = index.query("fox")
    assert [c.text for c in results] == ["The quick brown fox."]
    assert results[0].source_ref.line_start == 1


def test_blank_query_returns_nothing(index: ContentIndex):
    assert index.query("") == []
    assert index.query("   ") == []


def test_unmatched_query_returns_nothing(index: ContentIndex):
    assert index.query("zebra") == []


def test_bias_promotes_a_less_relevant_tagged_chunk(index: ContentIndex):
    results = index.query("dog", bias=FileTag.SPEC)
    assert len(results) == 2
    assert results[0].file_id == "spec.txt"

    results = index.query("dog", bias="notes")
    assert results[0].file_id == "notes.txt"


def test_limit_is_respected(index: ContentIndex):
    assert len(index.query("dog OR fox", limit=1)) == 1


def test_invalid_expression_raises(index: ContentIndex):
    with pytest.raises(IndexQueryError):
        index.query('"unterminated')


def test_by_tag_returns_chunks_in_order(index: ContentIndex):
    assert [c.text for c in index.by_tag(FileTag.NOTES)] == [
        "The quick brown fox.",
        "A lazy dog sleeps.",
    ]
    assert index.by_tag(FileTag.SLIDES) == []


def test_reopened_index_gives_identical_results(tmp_path: Path, index: ContentIndex):
    reopened = open_index(tmp_path)

    for expression in ("dog", "fox OR ball", "lazy"):
        assert reopened.query(expression) == index.query(expression)
    assert reopened.count_chunks() == 3
    assert reopened.get_metadata("assignment_id") == "hw1"


def test_get_chunk_and_list_files(index: ContentIndex):
    chunk = index.by_tag(FileTag.SPEC)[0]
    assert index.get_chunk(chunk.chunk_id) == chunk
    assert index.get_chunk("chunk-missing") is None

    assert index.list_files() == [
        {"file_id": "notes.txt", "tag": "notes", "chunks": 2},
        {"file_id": "spec.txt", "tag": "spec", "chunks": 1},
    ]
    assert [f["file_id"] for f in index.list_files("spec")] == ["spec.txt"]


def test_rebuild_replaces_previous_index(tmp_path: Path, index: ContentIndex):
    chunks = ParagraphChunker().chunk("Only zebras here.", "z.txt")
    ContentIndex.build(tmp_path / DB_FILENAME, chunks, {"z.txt": FileTag.OTHER})

    reopened = open_index(tmp_path)
    assert reopened.query("dog") == []
    assert len(reopened.query("zebras")) == 1
    assert not (tmp_path / (DB_FILENAME + ".tmp")).exists()


def test_open_missing_index_raises(tmp_path: Path):
    with pytest.raises(IndexNotFoundError):
        open_index(tmp_path / "nowhere")


def test_bias_breaks_ties_between_equally_relevant_chunks(tmp_path: Path):
    chunker = ParagraphChunker()
    text = "Balanced trees keep lookups fast."
    chunks = chunker.chunk(text, "reading.txt") + chunker.chunk(text, "handout.txt")
    index = ContentIndex.build(
        tmp_path / DB_FILENAME,
        chunks,
        {"reading.txt": FileTag.NOTES, "handout.txt": FileTag.SPEC},
    )

    unbiased = index.query("trees")
    assert [c.file_id for c in unbiased] == ["reading.txt", "handout.txt"]

    assert [c.file_id for c in index.query("trees", bias=FileTag.SPEC)] == ["handout.txt", "reading.txt"]
    assert [c.file_id for c in index.query("trees", bias=FileTag.NOTES)] == ["reading.txt", "handout.txt"]
    assert [c.file_id for c in index.query("trees", bias=FileTag.SLIDES)] == ["reading.txt", "handout.txt"]
