"""File selection and identity helpers."""

import hashlib
from pathlib import Path

# Extensions the chunkers know how to split
HEADING_EXTENSIONS = {".md", ".markdown"}
PARAGRAPH_EXTENSIONS = {".txt"}
SUPPORTED_EXTENSIONS = HEADING_EXTENSIONS | PARAGRAPH_EXTENSIONS


def is_supported(path: str | Path) -> bool:
    """Check if the file extension is one the chunkers handle."""
    return Path(path).suffix.lower() in SUPPORTED_EXTENSIONS


def short_digest(value: str, length: int) -> str:
    """Hex sha256 of ``value`` truncated to ``length`` characters."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()[:length]


def path_hash(path: str | Path) -> str:
    """8-character prefix used to disambiguate colliding file ids."""
    return short_digest(str(path), 8)


def read_text(path: Path) -> str:
    """Read a file as UTF-8 without newline translation.

    Line endings are kept exactly as stored so that chunk text can be
    reconstructed byte-for-byte from line ranges.
    """
    return path.read_bytes().decode("utf-8", errors="replace")
