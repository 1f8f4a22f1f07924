"""Append-only audit log written beside each run's metadata."""

import logging
import time
from pathlib import Path

logger = logging.getLogger(__name__)


class _UTCFormatter(logging.Formatter):
    converter = time.gmtime

    def formatTime(self, record: logging.LogRecord, datefmt=None) -> str:
        stamp = time.strftime("%Y-%m-%dT%H:%M:%S", self.converter(record.created))
        return f"{stamp}.{int(record.msecs):03d}Z"


class AuditLog:
    """One line per significant run event, in a file truncated at run start.

    Each run gets its own non-propagating logger so concurrent runs in one
    process never share a handler. Events are echoed to the module logger
    for console output.
    """

    def __init__(self, path: Path, run_id: str):
        self.path = path
        self._logger = logging.getLogger(f"{__name__}.{run_id}")
        self._logger.setLevel(logging.INFO)
        self._logger.propagate = False
        self._handler = logging.FileHandler(path, mode="w", encoding="utf-8")
        self._handler.setFormatter(_UTCFormatter("[%(asctime)s] %(message)s"))
        self._logger.addHandler(self._handler)

    def log(self, message: str, level: int = logging.INFO) -> None:
        self._logger.log(level, message)
        logger.log(level, message)

    def close(self) -> None:
        self._logger.removeHandler(self._handler)
        self._handler.close()

    def __enter__(self) -> "AuditLog":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
