"""
File system utilities for the media index.

Provides:
- Short path identifiers (identifiers.py)
- Media and marker file discovery (scanner.py)
"""

from .identifiers import ID_PATTERN, assign_identifiers, compute_path_digest, is_valid_id, min_prefix_length
from .scanner import ScannedFile, find_marker_files, scan_media_files

__all__ = [
    "ID_PATTERN",
    "assign_identifiers",
    "compute_path_digest",
    "is_valid_id",
    "min_prefix_length",
    "ScannedFile",
    "find_marker_files",
    "scan_media_files",
]
