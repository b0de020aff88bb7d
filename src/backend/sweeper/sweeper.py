from __future__ import annotations

import asyncio
import logging
import os
import shutil
import stat
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

from src.backend.errors import ReconciliationError
from src.backend.intents import Intent, IntentStore
from src.shared.clock import Clock, utc_now
from src.shared.intent_kind import IntentKind

from .models import RETENTION_WINDOW, SWEEP_PERIOD, SweepReport


logger = logging.getLogger(__name__)


class Sweeper:
    """
    Periodic reconciliation of expired intents.

    Each tick drains intents older than the retention window from the store
    (under the store lock) and then, with the lock released, performs the
    irreversible filesystem action:
    - delete: remove the marker file
    - archive: move the marker into the archive directory under its original name

    Per-file failures are logged and reported; a tick never raises for them.
    """

    def __init__(
        self,
        *,
        store: IntentStore,
        archive_dir: Optional[Path] = None,
        period: timedelta = SWEEP_PERIOD,
        retention: timedelta = RETENTION_WINDOW,
        clock: Clock = utc_now,
    ) -> None:
        self._store = store
        self._archive_dir = Path(archive_dir) if archive_dir else None
        self._period = period
        self._retention = retention
        self._clock = clock

        self._stop: Optional[asyncio.Event] = None
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def period(self) -> timedelta:
        return self._period

    # ---------------------------------------------------------------------
    # Reconciliation
    # ---------------------------------------------------------------------

    def tick(self, now: Optional[datetime] = None) -> SweepReport:
        now = now or self._clock()
        report = SweepReport(cutoff=now - self._retention)
        archive_dir = self._archive_dir

        kinds: tuple[IntentKind, ...] = tuple(IntentKind)
        if archive_dir is None:
            kinds = (IntentKind.DELETE,)
            waiting = self._store.pending(IntentKind.ARCHIVE)
            if waiting:
                logger.warning("%d archive marker(s) pending but no archive directory is configured", len(waiting))

        batch = self._store.drain_expired(report.cutoff, kinds)
        if batch:
            logger.info("sweeping %d delete(s), %d archive(s)", len(batch.deletes), len(batch.archives))

        for intent in batch.deletes:
            self._commit_delete(intent, report)
        if archive_dir is not None:
            for intent in batch.archives:
                self._commit_archive(intent, archive_dir, report)
        return report

    def _commit_delete(self, intent: Intent, report: SweepReport) -> None:
        logger.info("delete %s", intent.marker_path)
        try:
            intent.marker_path.unlink()
        except OSError as exc:
            self._fail(report, intent.marker_path, f"remove failed: {exc.strerror or exc}")
            return
        report.deleted.append(intent.marker_path)

    def _commit_archive(self, intent: Intent, archive_dir: Path, report: SweepReport) -> None:
        marker = intent.marker_path
        dst = archive_dir / intent.original_path.name

        try:
            dst_stat: Optional[os.stat_result] = dst.lstat()
        except FileNotFoundError:
            dst_stat = None
        except OSError as exc:
            self._fail(report, marker, f"cannot stat {dst}: {exc.strerror or exc}")
            return

        if dst_stat is not None:
            if not stat.S_ISREG(dst_stat.st_mode):
                self._conflict(report, marker, f"{dst} exists and is not a regular file")
                return

            try:
                src_size = marker.stat().st_size
            except OSError as exc:
                self._fail(report, marker, f"cannot stat: {exc.strerror or exc}")
                return

            if src_size == dst_stat.st_size:
                logger.info("%s is already archived", marker)
                try:
                    marker.unlink()
                except OSError as exc:
                    self._fail(report, marker, f"remove failed: {exc.strerror or exc}")
                    return
                report.already_archived.append(marker)
            else:
                self._conflict(
                    report, marker,
                    f"{dst} exists with a different size ({src_size} != {dst_stat.st_size})",
                )
            return

        logger.info("archive %s to %s", marker, dst)
        try:
            move_no_replace(marker, dst)
        except FileExistsError:
            self._conflict(report, marker, f"{dst} appeared while archiving")
            return
        except OSError as exc:
            self._fail(report, marker, f"move to {dst} failed: {exc.strerror or exc}")
            return
        report.archived.append(dst)

    @staticmethod
    def _conflict(report: SweepReport, marker: Path, reason: str) -> None:
        # Left for the operator: never overwrite, never delete.
        logger.warning("cannot archive %s: %s", marker, reason)
        report.conflicts.append(marker)

    @staticmethod
    def _fail(report: SweepReport, path: Path, message: str) -> None:
        error = ReconciliationError(path, message)
        logger.error("%s", error)
        report.errors.append(error)

    # ---------------------------------------------------------------------
    # Background task
    # ---------------------------------------------------------------------

    async def run(self, stop: asyncio.Event) -> None:
        """Tick once per period until stop is set."""
        timeout = self._period.total_seconds()
        while not stop.is_set():
            try:
                await asyncio.wait_for(stop.wait(), timeout=timeout)
            except asyncio.TimeoutError:
                pass
            if stop.is_set():
                break
            try:
                await asyncio.to_thread(self.tick)
            except Exception:  # noqa: BLE001 - keep the sweeper alive, next tick retries draining
                logger.exception("sweep tick failed")

    def start(self) -> asyncio.Task[None]:
        if self._task is not None and not self._task.done():
            return self._task
        self._stop = asyncio.Event()
        self._task = asyncio.create_task(self.run(self._stop), name="mediafiler-sweeper")
        return self._task

    async def stop(self) -> None:
        if self._stop is not None:
            self._stop.set()
        if self._task is not None:
            await self._task
        self._task = None
        self._stop = None


def move_no_replace(src: Path, dst: Path) -> None:
    """
    Move src to dst, failing with FileExistsError if dst already exists.

    A hard link claims dst atomically on the same filesystem; across
    filesystems (or where hard links are unsupported) the data is copied into
    an exclusively created dst.
    """
    try:
        os.link(src, dst)
    except FileExistsError:
        raise
    except OSError:
        _copy_exclusive(src, dst)
    src.unlink()


def _copy_exclusive(src: Path, dst: Path) -> None:
    with open(src, "rb") as fin, open(dst, "xb") as fout:
        try:
            shutil.copyfileobj(fin, fout)
        except BaseException:
            fout.close()
            dst.unlink()
            raise
    shutil.copystat(src, dst)
