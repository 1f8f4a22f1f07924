"""SQLite full-text content index."""

from workpacket.storage.store import DB_FILENAME, ContentIndex, open_index

__all__ = ["DB_FILENAME", "ContentIndex", "open_index"]
