"""Utility functions for workpacket."""

from workpacket.utils.files import SUPPORTED_EXTENSIONS, is_supported, path_hash, read_text
from workpacket.utils.tagging import tag_file, tag_files

__all__ = [
    "SUPPORTED_EXTENSIONS",
    "is_supported",
    "path_hash",
    "read_text",
    "tag_file",
    "tag_files",
]
