"""
Directory scanning for media files and leftover intent markers.

Each configured root is walked recursively. A subdirectory that vanishes or
cannot be read mid-walk is skipped with a warning; a root that cannot be
read at all raises ScanError.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, NamedTuple, Sequence

from src.backend.errors import ScanError
from src.shared.intent_kind import IntentKind


logger = logging.getLogger(__name__)


class ScannedFile(NamedTuple):
    """A media file found on disk."""
    path: Path
    modified_at: datetime


def scan_media_files(roots: Sequence[Path], suffixes: Sequence[str]) -> list[ScannedFile]:
    """
    Find all files under the roots whose name ends with one of the suffixes.

    Args:
        roots: Root directories to walk.
        suffixes: Accepted filename suffixes, including the leading dot.

    Returns:
        Files sorted by modification time (oldest first), ties by path.

    Raises:
        ScanError: If a root directory cannot be read.
    """
    found: list[ScannedFile] = []
    for root in roots:
        for path in _walk_files(root):
            if not path.name.endswith(tuple(suffixes)):
                continue
            try:
                mtime = path.stat().st_mtime
            except FileNotFoundError:
                # Renamed or removed between listing and stat
                continue
            found.append(ScannedFile(path=path, modified_at=datetime.fromtimestamp(mtime, tz=timezone.utc)))

    found.sort(key=lambda f: (f.modified_at, str(f.path)))
    return found


def find_marker_files(roots: Sequence[Path]) -> list[tuple[Path, IntentKind]]:
    """
    Find files renamed with an intent marker suffix by a previous run.

    Raises:
        ScanError: If a root directory cannot be read.
    """
    markers: list[tuple[Path, IntentKind]] = []
    for root in roots:
        for path in _walk_files(root):
            kind = IntentKind.from_marker(path)
            if kind is not None:
                markers.append((path, kind))
    markers.sort(key=lambda m: str(m[0]))
    return markers


def check_root(root: Path) -> None:
    """Raise ScanError unless root is a readable directory."""
    try:
        with os.scandir(root):
            pass
    except OSError as exc:
        raise ScanError(root, exc) from exc


def _walk_files(root: Path) -> Iterator[Path]:
    check_root(root)

    def on_error(exc: OSError) -> None:
        logger.warning("skipping unreadable directory %s: %s", exc.filename, exc.strerror or exc)

    for dirpath, _dirnames, filenames in os.walk(root, onerror=on_error):
        base = Path(dirpath)
        for name in filenames:
            path = base / name
            if path.is_file():
                yield path
