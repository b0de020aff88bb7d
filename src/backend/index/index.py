from __future__ import annotations

import logging
import threading
from pathlib import Path

from src.backend.errors import ConfigError, UnknownIDError
from src.backend.fs.identifiers import assign_identifiers
from src.backend.fs.scanner import find_marker_files, scan_media_files
from src.backend.intents import Intent, IntentStore
from src.backend.settings.models import MediaFilerSettings
from src.shared.clock import Clock, utc_now
from src.shared.intent_kind import IntentKind

from .models import ActionResult, FileEntry


logger = logging.getLogger(__name__)


class MediaIndex:
    """
    The current file listing plus pending intents, behind one lock.

    - list_files() re-walks the roots on every call (no caching)
    - ids resolve against the most recent listing
    - delete/archive requests rename the file to a marker name; undo renames it back

    The lock is held across the whole re-walk. Directories are expected to
    hold hundreds of files, not millions.
    """

    def __init__(self, settings: MediaFilerSettings, *, clock: Clock = utc_now) -> None:
        self._settings = settings
        self._lock = threading.RLock()
        self._files: list[FileEntry] = []
        self._store = IntentStore(lock=self._lock, clock=clock)

    @property
    def settings(self) -> MediaFilerSettings:
        return self._settings

    @property
    def store(self) -> IntentStore:
        return self._store

    @property
    def archive_enabled(self) -> bool:
        return self._settings.archive_enabled

    def recover(self) -> list[Intent]:
        """Load markers left on disk by a previous run into the intent store."""
        markers = find_marker_files(self._settings.roots)
        recovered = self._store.recover(markers)
        deletes = [str(i.marker_path) for i in recovered if i.kind == IntentKind.DELETE]
        archives = [str(i.marker_path) for i in recovered if i.kind == IntentKind.ARCHIVE]
        logger.info("to delete old %s", deletes)
        logger.info("to archive old %s", archives)
        return recovered

    def list_files(self) -> list[FileEntry]:
        with self._lock:
            scanned = scan_media_files(self._settings.roots, self._settings.suffixes)
            files = [FileEntry(path=f.path, id="", modified_at=f.modified_at) for f in scanned]
            assign_identifiers(files)
            self._files = files
            return list(files)

    def resolve_id(self, file_id: str) -> Path:
        with self._lock:
            for entry in self._files:
                if entry.id == file_id:
                    return entry.path
        raise UnknownIDError(file_id)

    def pending(self) -> list[Intent]:
        return self._store.pending()

    def request_delete(self, file_id: str, *, undo: bool = False) -> ActionResult:
        return self._request(IntentKind.DELETE, file_id, undo=undo)

    def request_archive(self, file_id: str, *, undo: bool = False) -> ActionResult:
        # Undo stays allowed so markers recovered after archiving was turned off
        # can still be restored.
        if not undo and not self.archive_enabled:
            raise ConfigError("archive not supported: no archive directory configured")
        return self._request(IntentKind.ARCHIVE, file_id, undo=undo)

    def _request(self, kind: IntentKind, file_id: str, *, undo: bool) -> ActionResult:
        with self._lock:
            if undo:
                marker = self._resolve_marker(kind, file_id)
                original = self._store.undo(marker)
                return ActionResult(kind=kind, undo=True, file_id=file_id, source=marker, destination=original)

            path = self.resolve_id(file_id)
            marker = self._store.mark(path, kind)
            return ActionResult(kind=kind, undo=False, file_id=file_id, source=path, destination=marker)

    def _resolve_marker(self, kind: IntentKind, file_id: str) -> Path:
        try:
            listed_marker = kind.marker_for(self.resolve_id(file_id))
        except UnknownIDError:
            listed_marker = None
        if listed_marker is not None and self._store.get(listed_marker) is not None:
            return listed_marker

        # A refreshed listing no longer shows marked files and may hand the same
        # id to a different file; match against pending intents' original paths.
        candidates = [
            intent.marker_path
            for intent in self._store.pending(kind)
            if intent.undo_id.startswith(file_id)
        ]
        if len(candidates) == 1:
            return candidates[0]
        if listed_marker is not None:
            # The store rejects it as not pending.
            return listed_marker
        raise UnknownIDError(file_id)
