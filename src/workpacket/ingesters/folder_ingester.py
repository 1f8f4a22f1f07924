"""Ingesters for local files and folders."""

import os
from pathlib import Path
from typing import Iterator

from workpacket.models import SourceDocument
from workpacket.utils.files import is_supported, read_text

# Directories that never hold source material
SKIP_DIRS = {
    "__pycache__",
    "node_modules",
    ".git",
    ".svn",
    ".hg",
    ".venv",
    ".tox",
    ".pytest_cache",
    ".mypy_cache",
    ".ruff_cache",
}


class FileIngester:
    """Ingester for a single file given directly as a root."""

    source_type = "file"

    def can_handle(self, source: Path) -> bool:
        """Check if this is an existing file (symlinks are followed)."""
        return source.is_file()

    def ingest(self, source: Path) -> Iterator[SourceDocument]:
        """Yield the file itself, keyed by its basename, if supported."""
        if is_supported(source):
            yield SourceDocument(file_id=source.name, path=source, content=read_text(source))


class FolderIngester:
    """Ingester for local filesystem folders."""

    source_type = "folder"

    def can_handle(self, source: Path) -> bool:
        """Check if this is an existing directory."""
        return source.is_dir()

    def ingest(self, source: Path) -> Iterator[SourceDocument]:
        """Yield supported documents from a folder recursively.

        Symbolic links to files and directories are followed, so a directory
        reachable through several paths is walked under each of them. Only a
        link back to a directory on the current descent path (a cycle) is
        pruned.

        Args:
            source: Absolute path to the folder

        Yields:
            SourceDocument objects keyed by their POSIX path relative to source
        """
        ancestors: dict[str, tuple[str, ...]] = {str(source): ()}
        for root, dirs, files in os.walk(source, followlinks=True):
            real = os.path.realpath(root)
            chain = ancestors.pop(root, ())
            if real in chain:
                dirs[:] = []
                continue
            chain += (real,)
            dirs[:] = sorted(d for d in dirs if d not in SKIP_DIRS)
            for d in dirs:
                ancestors[os.path.join(root, d)] = chain

            for filename in sorted(files):
                full_path = Path(root) / filename
                if not is_supported(full_path) or not full_path.is_file():
                    continue

                rel_path = full_path.relative_to(source)
                yield SourceDocument(
                    file_id=rel_path.as_posix(),
                    path=full_path,
                    content=read_text(full_path),
                )
