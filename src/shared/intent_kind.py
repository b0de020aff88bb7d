"""
Intent kind enum shared across backend modules and tests.

A pending intent is encoded on disk by renaming the file with the kind's
marker suffix:
    movie.mp4 -> movie.mp4.delete
    movie.mp4 -> movie.mp4.archive
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional


class IntentKind(str, Enum):
    DELETE = "delete"
    ARCHIVE = "archive"

    @property
    def marker_suffix(self) -> str:
        return f".{self.value}"

    def marker_for(self, original: Path) -> Path:
        return original.with_name(original.name + self.marker_suffix)

    def strip_marker(self, marker: Path) -> Path:
        if not marker.name.endswith(self.marker_suffix):
            raise ValueError(f"{marker} does not end with {self.marker_suffix}")
        return marker.with_name(marker.name[: -len(self.marker_suffix)])

    @classmethod
    def from_marker(cls, path: Path | str) -> Optional["IntentKind"]:
        """Return the kind whose marker suffix the file name carries, if any."""
        name = Path(path).name
        for kind in cls:
            if name.endswith(kind.marker_suffix) and len(name) > len(kind.marker_suffix):
                return kind
        return None
