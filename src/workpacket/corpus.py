"""Discover, chunk and tag a set of input roots."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from workpacket.chunkers import get_chunker
from workpacket.exceptions import EmptyCorpusError, NoSupportedFilesError
from workpacket.ingesters import discover_documents
from workpacket.models import Chunk, FileTag, SourceDocument
from workpacket.utils.files import SUPPORTED_EXTENSIONS
from workpacket.utils.tagging import tag_file

logger = logging.getLogger(__name__)


@dataclass
class Corpus:
    """Everything ingestion produces for one run."""

    documents: list[SourceDocument] = field(default_factory=list)
    chunks: list[Chunk] = field(default_factory=list)
    file_tags: dict[str, FileTag] = field(default_factory=dict)

    def chunks_for(self, file_id: str) -> list[Chunk]:
        return [c for c in self.chunks if c.file_id == file_id]


def chunk_document(doc: SourceDocument) -> list[Chunk]:
    """Split one document with the strategy matching its extension."""
    return get_chunker(doc.path).chunk(doc.content, doc.file_id)


def build_corpus(roots: Iterable[Path | str]) -> Corpus:
    """Discover, chunk and tag every supported file under ``roots``.

    Raises:
        InputPathNotFoundError: a root does not exist
        NoSupportedFilesError: no supported file was found
        EmptyCorpusError: every supported file was blank
    """
    roots = [str(r) for r in roots]
    documents = discover_documents(roots)
    if not documents:
        raise NoSupportedFilesError(
            f"No supported files found (extensions: {', '.join(sorted(SUPPORTED_EXTENSIONS))}). "
            f"Searched: {', '.join(roots)}"
        )

    corpus = Corpus(documents=documents)
    for doc in documents:
        chunks = chunk_document(doc)
        corpus.chunks.extend(chunks)
        corpus.file_tags[doc.file_id] = tag_file(doc.file_id)
        logger.debug(f"  {doc.file_id}: {len(chunks)} chunks [{corpus.file_tags[doc.file_id].value}]")

    if not corpus.chunks:
        raise EmptyCorpusError(
            f"All {len(documents)} supported file(s) produced zero chunks "
            "(files may be empty or whitespace-only)"
        )

    return corpus
