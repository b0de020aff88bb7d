from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path

from src.backend.errors import ReconciliationError


# Minimum time a marked file stays undoable. The sweep period is the same
# value: a mark survives at least one full period and at most two.
RETENTION_WINDOW = timedelta(minutes=11)
SWEEP_PERIOD = RETENTION_WINDOW


@dataclass
class SweepReport:
    """What one sweeper tick did."""
    cutoff: datetime
    deleted: list[Path] = field(default_factory=list)
    archived: list[Path] = field(default_factory=list)       # destination paths
    already_archived: list[Path] = field(default_factory=list)  # local markers removed
    conflicts: list[Path] = field(default_factory=list)      # local markers left in place
    errors: list[ReconciliationError] = field(default_factory=list)

    @property
    def committed_count(self) -> int:
        return len(self.deleted) + len(self.archived) + len(self.already_archived)
