"""
Models for the media index.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, NamedTuple

from src.shared.clock import format_utc_z
from src.shared.intent_kind import IntentKind


@dataclass
class FileEntry:
    """One media file of the current scan."""
    path: Path
    id: str
    modified_at: datetime

    @property
    def title(self) -> str:
        """File name without its extension."""
        return self.path.stem

    def to_public_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "path": str(self.path),
            "title": self.title,
            "modified_at": format_utc_z(self.modified_at),
        }


class ActionResult(NamedTuple):
    """Result of a delete/archive request or its undo."""
    kind: IntentKind
    undo: bool
    file_id: str
    source: Path
    destination: Path
