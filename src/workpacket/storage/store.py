"""SQLite FTS5-backed content index."""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Mapping, Optional

from workpacket.exceptions import IndexNotFoundError, IndexQueryError
from workpacket.models import Chunk, FileTag, SourceRef
from workpacket.storage.schema import SCHEMA

logger = logging.getLogger(__name__)

DB_FILENAME = "chunks.db"
DEFAULT_LIMIT = 20
# Subtracted from the bm25 rank (lower is better) of chunks whose file carries the bias tag
BIAS_BOOST = 10.0

_CHUNK_COLUMNS = "c.chunk_id, c.file_id, c.text, c.source_ref"


class ContentIndex:
    """Keyword-searchable store of chunks and file tags.

    An index is written once by ``build`` and is read-only afterwards;
    there are no incremental updates.
    """

    def __init__(self, path: Path | str, readonly: bool = True):
        self.path = Path(path)
        self.readonly = readonly

    @classmethod
    def build(
        cls,
        path: Path | str,
        chunks: list[Chunk],
        file_tags: Mapping[str, FileTag],
        metadata: Optional[Mapping[str, str]] = None,
    ) -> "ContentIndex":
        """Write a fresh index at ``path`` and return a read-only handle.

        The database is assembled in a temporary file and moved into place,
        so a failed build never leaves a partial index behind.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(path.name + ".tmp")
        tmp_path.unlink(missing_ok=True)

        try:
            writer = cls(tmp_path, readonly=False)
            with writer.connection() as conn:
                conn.executescript(SCHEMA)
                conn.executemany(
                    "INSERT OR IGNORE INTO files (file_id, tag) VALUES (?, ?)",
                    [(file_id, FileTag(tag).value) for file_id, tag in file_tags.items()],
                )
                conn.executemany(
                    "INSERT INTO chunks (chunk_id, file_id, text, source_ref) VALUES (?, ?, ?, ?)",
                    [
                        (
                            chunk.chunk_id,
                            chunk.file_id,
                            chunk.text,
                            chunk.source_ref.model_dump_json(exclude_none=True),
                        )
                        for chunk in chunks
                    ],
                )
                conn.execute("INSERT INTO chunks_fts(rowid, text) SELECT rowid, text FROM chunks")
                conn.executemany(
                    "INSERT OR REPLACE INTO metadata (key, value) VALUES (?, ?)",
                    list((metadata or {}).items()),
                )
            os.replace(tmp_path, path)
        except Exception:
            tmp_path.unlink(missing_ok=True)
            raise

        logger.debug(f"Indexed {len(chunks)} chunks from {len(file_tags)} files -> {path}")
        return cls(path)

    @classmethod
    def open(cls, path: Path | str) -> "ContentIndex":
        """Open an existing index for read-only queries."""
        path = Path(path)
        if not path.is_file():
            raise IndexNotFoundError(f"Content index not found: {path}")
        return cls(path)

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Context manager for database connections."""
        if self.readonly:
            conn = sqlite3.connect(f"{self.path.resolve().as_uri()}?mode=ro", uri=True)
        else:
            conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def query(
        self,
        query: str,
        limit: Optional[int] = None,
        bias: Optional[FileTag | str] = None,
    ) -> list[Chunk]:
        """Retrieve chunks matching an FTS5 expression, best first.

        Terms must be combined explicitly (``a OR b``); FTS5 reads bare
        whitespace as AND. A blank query returns no chunks. With ``bias``,
        chunks from files carrying that tag move ahead of equally relevant
        chunks without excluding the rest.
        """
        if not query.strip():
            return []
        limit = DEFAULT_LIMIT if limit is None else limit

        if bias is not None:
            sql = f"""
                SELECT {_CHUNK_COLUMNS},
                       (chunks_fts.rank - CASE WHEN f.tag = ? THEN ? ELSE 0 END) AS adjusted_rank
                FROM chunks_fts
                JOIN chunks c ON chunks_fts.rowid = c.rowid
                JOIN files f ON c.file_id = f.file_id
                WHERE chunks_fts MATCH ?
                ORDER BY adjusted_rank, c.rowid
                LIMIT ?
            """
            params: tuple = (FileTag(bias).value, BIAS_BOOST, query, limit)
        else:
            sql = f"""
                SELECT {_CHUNK_COLUMNS}, chunks_fts.rank AS adjusted_rank
                FROM chunks_fts
                JOIN chunks c ON chunks_fts.rowid = c.rowid
                WHERE chunks_fts MATCH ?
                ORDER BY adjusted_rank, c.rowid
                LIMIT ?
            """
            params = (query, limit)

        with self.connection() as conn:
            try:
                rows = conn.execute(sql, params).fetchall()
            except sqlite3.OperationalError as e:
                raise IndexQueryError(f"Invalid index query {query!r}: {e}") from e
        return [self._to_chunk(row) for row in rows]

    def by_tag(self, tag: FileTag | str, limit: Optional[int] = None) -> list[Chunk]:
        """Chunks from files carrying ``tag``, in ingestion order, unscored."""
        limit = DEFAULT_LIMIT if limit is None else limit
        with self.connection() as conn:
            rows = conn.execute(
                f"""SELECT {_CHUNK_COLUMNS}
                    FROM chunks c JOIN files f ON c.file_id = f.file_id
                    WHERE f.tag = ?
                    ORDER BY c.rowid
                    LIMIT ?""",
                (FileTag(tag).value, limit),
            ).fetchall()
        return [self._to_chunk(row) for row in rows]

    def get_chunk(self, chunk_id: str) -> Optional[Chunk]:
        with self.connection() as conn:
            row = conn.execute(
                f"SELECT {_CHUNK_COLUMNS} FROM chunks c WHERE c.chunk_id = ?", (chunk_id,)
            ).fetchone()
        return self._to_chunk(row) if row else None

    def count_chunks(self) -> int:
        with self.connection() as conn:
            return conn.execute("SELECT COUNT(*) FROM chunks").fetchone()[0]

    def list_files(self, path_prefix: str = "") -> list[dict]:
        """List files with their tag and chunk count, optionally by prefix."""
        with self.connection() as conn:
            cursor = conn.execute(
                """SELECT f.file_id, f.tag, COUNT(c.chunk_id) AS chunks
                   FROM files f LEFT JOIN chunks c ON c.file_id = f.file_id
                   WHERE f.file_id LIKE ?
                   GROUP BY f.file_id ORDER BY f.file_id""",
                (f"{path_prefix}%",),
            )
            return [dict(row) for row in cursor]

    def get_metadata(self, key: str) -> Optional[str]:
        """Retrieve a metadata value by key."""
        with self.connection() as conn:
            row = conn.execute("SELECT value FROM metadata WHERE key = ?", (key,)).fetchone()
            return row["value"] if row else None

    @staticmethod
    def _to_chunk(row: sqlite3.Row) -> Chunk:
        return Chunk(
            chunk_id=row["chunk_id"],
            file_id=row["file_id"],
            text=row["text"],
            source_ref=SourceRef.model_validate_json(row["source_ref"]),
        )


def open_index(output_dir: Path | str) -> ContentIndex:
    """Open the index a run wrote into ``output_dir``."""
    return ContentIndex.open(Path(output_dir) / DB_FILENAME)
