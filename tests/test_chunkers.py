from pathlib import Path

import pytest

from workpacket.chunkers import HeadingChunker, ParagraphChunker, get_chunker, make_chunk_id

from conftest import reconstruct


def test_heading_inside_fence_does_not_split():
    text = "# Title\n```\n# Inside fence\n```\n# Next\nbody\n"
    chunks = HeadingChunker().chunk(text, "doc.md")

    assert len(chunks) == 2
    assert "# Inside fence" in chunks[0].text
    assert chunks[0].source_ref.section == "Title"
    assert chunks[1].text == "# Next\nbody"
    assert (chunks[1].source_ref.line_start, chunks[1].source_ref.line_end) == (5, 6)


def test_preamble_before_first_heading_is_a_chunk():
    chunks = HeadingChunker().chunk("intro line\n\n# Heading\ncontent", "doc.md")

    assert [c.text for c in chunks] == ["intro line", "# Heading\ncontent"]
    assert chunks[0].source_ref.section is None
    assert chunks[0].source_ref.line_start == 1
    assert chunks[1].source_ref.section == "Heading"


def test_paragraphs_split_on_blank_lines():
    chunks = ParagraphChunker().chunk("\n\nfirst\nstill first\n\n\n\nsecond\n\n", "n.txt")

    assert [c.text for c in chunks] == ["first\nstill first", "second"]
    assert [(c.source_ref.line_start, c.source_ref.line_end) for c in chunks] == [(3, 4), (8, 8)]


@pytest.mark.parametrize("chunker", [HeadingChunker(), ParagraphChunker()])
def test_whitespace_only_text_yields_nothing(chunker):
    assert chunker.chunk("", "f") == []
    assert chunker.chunk("  \n\t\n\n", "f") == []


def test_crlf_line_endings_are_kept():
    chunks = ParagraphChunker().chunk("a\r\nb\r\n\r\nc", "w.txt")

    assert chunks[0].text == "a\r\nb\r"
    assert chunks[1].text == "c"
    assert chunks[1].source_ref.line_start == 4


@pytest.mark.parametrize(
    "name, content",
    [
        ("doc.md", "\n\n# One\n\ntext under one\n\n\n## Two\nmore\n```\n# not a heading\n```\n\n"),
        ("doc.md", "no headings at all\n\njust prose\n"),
        ("notes.txt", "\n\npara one\nline two\n\n\npara two\n\n\n"),
    ],
)
def test_line_ranges_reproduce_chunk_text(tmp_path: Path, name, content):
    path = tmp_path / name
    path.write_text(content)

    chunks = get_chunker(path).chunk(content, name)

    assert chunks
    for chunk in chunks:
        ref = chunk.source_ref
        assert reconstruct(path, ref.line_start, ref.line_end) == chunk.text


def test_chunk_ids_are_deterministic_and_distinct():
    text = "# A\none\n# B\ntwo\n# C\nthree"
    first = HeadingChunker().chunk(text, "x.md")
    second = HeadingChunker().chunk(text, "x.md")

    assert [c.chunk_id for c in first] == [c.chunk_id for c in second]
    assert len({c.chunk_id for c in first}) == 3
    assert first[0].chunk_id == make_chunk_id("x.md", 0)
    assert first[0].chunk_id.startswith("chunk-")
    assert len(first[0].chunk_id) == len("chunk-") + 12


def test_chunker_selection_by_extension():
    assert isinstance(get_chunker("a/b.MD"), HeadingChunker)
    assert isinstance(get_chunker("a/b.markdown"), HeadingChunker)
    assert isinstance(get_chunker("a/b.txt"), ParagraphChunker)


def test_fenced_heading_example():
    text = "# Before\nText\n```\n# Inside fence\n```\n# After\nMore text"
    chunks = HeadingChunker().chunk(text, "example.md")

    assert len(chunks) == 2
    assert "# Inside fence" in chunks[0].text
    assert chunks[1].source_ref.section == "After"


def test_chunkers_satisfy_protocol():
    from workpacket.protocols import ChunkingStrategy

    assert isinstance(HeadingChunker(), ChunkingStrategy)
    assert isinstance(ParagraphChunker(), ChunkingStrategy)
