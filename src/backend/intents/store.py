from __future__ import annotations

import logging
import os
import threading
from datetime import datetime
from pathlib import Path
from typing import Collection, Iterable, Optional

from src.backend.errors import InvalidTargetError, RenameError
from src.shared.clock import Clock, utc_now
from src.shared.intent_kind import IntentKind

from .models import DrainedBatch, Intent


logger = logging.getLogger(__name__)

# Rename failures caused by the request rather than the host
_CLIENT_RENAME_ERRORS = (FileNotFoundError, FileExistsError, IsADirectoryError, NotADirectoryError)


class IntentStore:
    """
    Pending delete/archive intents keyed by marker path.

    The store mirrors disk state: an entry is recorded only after the file has
    been renamed to its marker name, and removed only after it has been renamed
    back (undo) or drained for reconciliation.

    The lock may be shared with the owner so that reads of other state and
    store mutations happen under one critical section.
    """

    def __init__(self, *, lock: Optional[threading.RLock] = None, clock: Clock = utc_now) -> None:
        self._lock = lock if lock is not None else threading.RLock()
        self._clock = clock
        self._intents: dict[Path, Intent] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._intents)

    def get(self, marker_path: Path) -> Optional[Intent]:
        with self._lock:
            return self._intents.get(marker_path)

    def pending(self, kind: Optional[IntentKind] = None) -> list[Intent]:
        with self._lock:
            intents = [i for i in self._intents.values() if kind is None or i.kind == kind]
        intents.sort(key=lambda i: (i.requested_at, str(i.marker_path)))
        return intents

    def mark(self, original_path: Path, kind: IntentKind) -> Path:
        """
        Rename a file to its marker name and record the intent.

        Raises:
            InvalidTargetError: If the path is not a plain existing file.
            RenameError: If the marker name is taken or the rename fails.
        """
        with self._lock:
            if IntentKind.from_marker(original_path) is not None:
                raise InvalidTargetError(original_path, "already marked")
            if not original_path.is_file():
                raise InvalidTargetError(original_path, "not an existing file")

            marker_path = kind.marker_for(original_path)
            if os.path.lexists(marker_path):
                raise RenameError(original_path, marker_path, client_error=True)

            _rename(original_path, marker_path)
            self._intents[marker_path] = Intent(marker_path=marker_path, kind=kind, requested_at=self._clock())
            logger.info("marked %s for %s", original_path, kind.value)
            return marker_path

    def undo(self, marker_path: Path) -> Path:
        """
        Rename a marker back to its original name and forget the intent.

        Raises:
            InvalidTargetError: If no intent is pending for the marker (never
                marked, or already drained for reconciliation).
            RenameError: If the original name is taken or the rename fails.
        """
        with self._lock:
            intent = self._intents.get(marker_path)
            if intent is None:
                raise InvalidTargetError(marker_path, "no pending intent")

            original_path = intent.original_path
            if os.path.lexists(original_path):
                raise RenameError(marker_path, original_path, client_error=True)

            _rename(marker_path, original_path)
            del self._intents[marker_path]
            logger.info("undid %s of %s", intent.kind.value, original_path)
            return original_path

    def recover(self, markers: Iterable[tuple[Path, IntentKind]]) -> list[Intent]:
        """
        Seed the store with markers left on disk by a previous run.

        Each recovered intent is stamped with the current time, so it gets a
        full undo window after a restart.
        """
        now = self._clock()
        recovered: list[Intent] = []
        with self._lock:
            for marker_path, kind in markers:
                if marker_path in self._intents:
                    continue
                intent = Intent(marker_path=marker_path, kind=kind, requested_at=now)
                self._intents[marker_path] = intent
                recovered.append(intent)
        return recovered

    def drain_expired(
        self,
        cutoff: datetime,
        kinds: Collection[IntentKind] = tuple(IntentKind),
    ) -> DrainedBatch:
        """
        Remove and return every intent of the given kinds requested before cutoff.

        Once drained an intent can no longer be undone.
        """
        deletes: list[Intent] = []
        archives: list[Intent] = []
        with self._lock:
            expired = [
                i for i in self._intents.values()
                if i.kind in kinds and i.requested_at < cutoff
            ]
            for intent in expired:
                del self._intents[intent.marker_path]
                if intent.kind == IntentKind.DELETE:
                    deletes.append(intent)
                else:
                    archives.append(intent)
        return DrainedBatch(deletes=deletes, archives=archives)


def _rename(src: Path, dst: Path) -> None:
    try:
        os.rename(src, dst)
    except _CLIENT_RENAME_ERRORS as exc:
        raise RenameError(src, dst, client_error=True, cause=exc) from exc
    except OSError as exc:
        raise RenameError(src, dst, client_error=False, cause=exc) from exc
