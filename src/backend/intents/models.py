"""
Models for pending delete/archive intents.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from src.backend.fs.identifiers import compute_path_digest
from src.shared.clock import format_utc_z
from src.shared.intent_kind import IntentKind


@dataclass(frozen=True)
class Intent:
    """A file renamed with a marker suffix, waiting to be reconciled."""
    marker_path: Path
    kind: IntentKind
    requested_at: datetime

    @property
    def original_path(self) -> Path:
        return self.kind.strip_marker(self.marker_path)

    @property
    def undo_id(self) -> str:
        """Full digest of the original path; any unique prefix of it undoes the intent."""
        return compute_path_digest(self.original_path)

    def to_public_dict(self) -> dict[str, Any]:
        return {
            "marker_path": str(self.marker_path),
            "original_path": str(self.original_path),
            "undo_id": self.undo_id,
            "kind": self.kind.value,
            "requested_at": format_utc_z(self.requested_at),
        }


@dataclass(frozen=True)
class DrainedBatch:
    """Expired intents removed from the store in one sweep."""
    deletes: list[Intent]
    archives: list[Intent]

    def __len__(self) -> int:
        return len(self.deletes) + len(self.archives)
