import os
from pathlib import Path

import pytest

from workpacket.corpus import build_corpus
from workpacket.exceptions import EmptyCorpusError, InputPathNotFoundError, NoSupportedFilesError
from workpacket.ingesters import discover_documents
from workpacket.models import FileTag
from workpacket.utils.files import path_hash

def test_missing_root_raises(tmp_path: Path):
    missing = tmp_path / "nope"
    with pytest.raises(InputPathNotFoundError) as exc_info:
        discover_documents([missing])
    assert str(missing) in str(exc_info.value)

def test_folder_walk_filters_and_orders(tmp_path: Path):
    (tmp_path / "b").mkdir()
    (tmp_path / "node_modules").mkdir()
    (tmp_path / "b" / "z.md").write_text("# z")
    (tmp_path / "a.txt").write_text("a")
    (tmp_path / "image.png").write_bytes(b"\x89PNG")
    (tmp_path / "node_modules" / "dep.md").write_text("# dep")

    docs = discover_documents([tmp_path])

    assert [d.file_id for d in docs] == ["a.txt", "b/z.md"]
    assert docs[1].extension == ".md"

def test_direct_file_root_uses_basename(tmp_path: Path):
    path = tmp_path / "deep" / "handout.md"
    path.parent.mkdir()
    path.write_text("# Handout")

    docs = discover_documents([path])

    assert [d.file_id for d in docs] == ["handout.md"]

def test_same_file_reached_twice_is_kept_once(tmp_path: Path):
    path = tmp_path / "spec.md"
    path.write_text("# Spec")

    docs = discover_documents([tmp_path, path])

    assert len(docs) == 1

def test_colliding_file_ids_are_disambiguated(tmp_path: Path):
    first = tmp_path / "one" / "readme.md"
    second = tmp_path / "two" / "readme.md"
    for path in (first, second):
        path.parent.mkdir()
        path.write_text(f"# {path.parent.name}")

    docs = discover_documents([first, second])

    ids = [d.file_id for d in docs]
    assert len(set(ids)) == 2
    assert ids[0] == f"{path_hash(first)}/readme.md"
    assert all(i.endswith("/readme.md") for i in ids)

def test_symlinks_are_followed(tmp_path: Path):
    real = tmp_path / "real"
    real.mkdir()
    (real / "notes.txt").write_text("linked content")
    root = tmp_path / "root"
    root.mkdir()
    os.symlink(real, root / "linked")
    os.symlink(real / "notes.txt", root / "alias.txt")

    docs = discover_documents([root])

    assert sorted(d.file_id for d in docs) == ["alias.txt", "linked/notes.txt"]

def test_symlink_cycle_terminates(tmp_path: Path):
    (tmp_path / "a.md").write_text("# a")
    os.symlink(tmp_path, tmp_path / "loop")

    docs = discover_documents([tmp_path])

    assert [d.file_id for d in docs] == ["a.md"]

def test_directory_reached_through_a_link_is_walked_under_both_paths(tmp_path: Path):
    (tmp_path / "real").mkdir()
    (tmp_path / "real" / "a.md").write_text("# a")
    os.symlink(tmp_path / "real", tmp_path / "alias")

    first = discover_documents([tmp_path])
    second = discover_documents([tmp_path])

    assert [d.file_id for d in first] == ["alias/a.md", "real/a.md"]
    assert [d.file_id for d in second] == [d.file_id for d in first]

def test_linked_file_root_keeps_its_own_name(tmp_path: Path):
    target = tmp_path / "target.md"
    target.write_text("# Target")
    os.symlink(target, tmp_path / "handout.md")

    docs = discover_documents([tmp_path / "handout.md"])

    assert [d.file_id for d in docs] == ["handout.md"]
    assert docs[0].content == "# Target"

def test_build_corpus_chunks_and_tags(assignment: Path):
    corpus = build_corpus([assignment])

    assert [d.file_id for d in corpus.documents] == ["notes.txt", "slides/lecture1.md", "spec.md"]
    assert corpus.file_tags == {
        "notes.txt": FileTag.NOTES,
        "slides/lecture1.md": FileTag.SLIDES,
        "spec.md": FileTag.SPEC,
    }
    assert len(corpus.chunks_for("slides/lecture1.md")) == 2
    assert len({c.chunk_id for c in corpus.chunks}) == len(corpus.chunks)

def test_build_corpus_is_deterministic(assignment: Path):
    first = build_corpus([assignment])
    second = build_corpus([assignment])
    assert [c.chunk_id for c in first.chunks] == [c.chunk_id for c in second.chunks]

def test_no_supported_files(tmp_path: Path):
    (tmp_path / "data.csv").write_text("a,b")
    with pytest.raises(NoSupportedFilesError):
        build_corpus([tmp_path])

def test_blank_files_make_an_empty_corpus(tmp_path: Path):
    (tmp_path / "empty.md").write_text("")
    (tmp_path / "blank.txt").write_text("   \n\n")
    with pytest.raises(EmptyCorpusError):
        build_corpus([tmp_path])

def test_ingester_registry_picks_by_root_kind(tmp_path: Path):
    from workpacket.ingesters import FileIngester, FolderIngester, get_ingester
    from workpacket.protocols import Ingester

    path = tmp_path / "a.md"
    path.write_text("# a")

    assert isinstance(get_ingester(tmp_path), FolderIngester)
    assert isinstance(get_ingester(path), FileIngester)
    assert all(isinstance(i, Ingester) for i in (FileIngester(), FolderIngester()))
