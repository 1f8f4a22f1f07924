"""Root handlers (ingesters) and document discovery."""

import logging
import os
from pathlib import Path
from typing import Iterable, Optional

from workpacket.exceptions import InputPathNotFoundError
from workpacket.ingesters.folder_ingester import FileIngester, FolderIngester
from workpacket.models import SourceDocument
from workpacket.protocols import Ingester
from workpacket.utils.files import path_hash

logger = logging.getLogger(__name__)

# Registry of available ingesters
_INGESTERS: list[Ingester] = [
    FileIngester(),
    FolderIngester(),
]


def get_ingester(source: Path | str) -> Optional[Ingester]:
    """Find an ingester that can handle the given root.

    Args:
        source: Path to a file or folder

    Returns:
        An Ingester instance that can handle the root, or None
    """
    source_path = Path(source)
    for ingester in _INGESTERS:
        if ingester.can_handle(source_path):
            return ingester
    return None


def register_ingester(ingester: Ingester) -> None:
    """Register a custom ingester (for plugins/extensions).

    Args:
        ingester: An object implementing the Ingester protocol
    """
    _INGESTERS.append(ingester)


def discover_documents(roots: Iterable[Path | str]) -> list[SourceDocument]:
    """Discover all supported documents under the given roots.

    Raises InputPathNotFoundError as soon as a root is missing. Roots are
    made absolute without resolving symbolic links, so a linked file root
    keeps the basename it was given under. The same absolute path reached
    twice is kept once. File ids shared by different paths are prefixed
    with a hash of the absolute path. Results are sorted by absolute path
    so ordering is stable across runs.
    """
    by_path: dict[str, SourceDocument] = {}

    for root in roots:
        source = Path(os.path.abspath(root))
        if not source.exists():
            raise InputPathNotFoundError(str(root))

        ingester = get_ingester(source)
        if ingester is None:
            logger.warning(f"Skipping unsupported input: {root}")
            continue

        for doc in ingester.ingest(source):
            by_path.setdefault(str(doc.path), doc)

    id_counts: dict[str, int] = {}
    for doc in by_path.values():
        id_counts[doc.file_id] = id_counts.get(doc.file_id, 0) + 1

    documents = []
    for abs_path in sorted(by_path):
        doc = by_path[abs_path]
        if id_counts[doc.file_id] > 1:
            doc = SourceDocument(
                file_id=f"{path_hash(abs_path)}/{doc.file_id}",
                path=doc.path,
                content=doc.content,
            )
        documents.append(doc)
    return documents


__all__ = [
    "FileIngester",
    "FolderIngester",
    "discover_documents",
    "get_ingester",
    "register_ingester",
]
