"""
BackupScheduler -- In-process polling scheduler for the backup ring.

Contract:
    Polls on a fixed interval.  Each ``tick()`` reads AutoBackupSettings
    and, when enabled, snapshots the store if ``should_snapshot()`` (pure)
    says the newest slot is an interval old or the ring is empty.  The
    first tick runs as soon as the scheduler starts, so a stale ring is
    refreshed immediately.

    ``backup_now()`` snapshots regardless of the settings' ``enabled``
    flag.  Manual and scheduled snapshots share one non-blocking lock:
    a trigger that finds a snapshot in flight returns None at once.

Invariants enforced:
    - All timestamps from the injected Clock.
    - Graceful shutdown (respects the stop signal between ticks).
    - One snapshot in flight at a time.
"""

from __future__ import annotations

import threading
from typing import Callable

from sqlalchemy.orm import Session

from payroll_backup.domain.policy import should_snapshot
from payroll_backup.services.snapshot_service import SnapshotService
from payroll_config.service import SettingsService
from payroll_kernel.domain.clock import Clock, SystemClock
from payroll_kernel.domain.dtos import BackupSlot
from payroll_kernel.logging_config import get_logger

logger = get_logger("backup.scheduler")


class BackupScheduler:
    """Background thread that keeps the backup ring fresh.

    Non-goals:
        - NOT a cross-process scheduler; two processes on one database
          file each run their own ring trimming.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        clock: Clock | None = None,
        poll_interval_seconds: float = 60,
    ):
        self._session_factory = session_factory
        self._clock = clock or SystemClock()
        self._poll_interval = poll_interval_seconds
        self._stop_event = threading.Event()
        self._in_flight = threading.Lock()
        self._thread: threading.Thread | None = None

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def tick(self) -> BackupSlot | None:
        """Snapshot if the settings and the ring say so (public for testing).

        Returns the new slot, or None when nothing was taken.
        """
        return self._run(manual=False)

    def backup_now(self) -> BackupSlot | None:
        """Snapshot immediately; None if another snapshot is in flight."""
        return self._run(manual=True)

    @property
    def is_backing_up(self) -> bool:
        return self._in_flight.locked()

    def start(self) -> None:
        """Start polling in a background thread."""
        if self._thread is not None and self._thread.is_alive():
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run_loop,
            name="backup-scheduler",
            daemon=True,
        )
        self._thread.start()
        logger.info("backup_scheduler_started", extra={"poll_interval": self._poll_interval})

    def stop(self, timeout: float = 30.0) -> None:
        """Signal stop and wait for the current tick to finish.

        Args:
            timeout: Max seconds to wait for the thread to finish.
        """
        self._stop_event.set()
        if self._thread is not None and self._thread.is_alive():
            self._thread.join(timeout=timeout)
        logger.info("backup_scheduler_stopped")

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _run_loop(self) -> None:
        """Polling loop.  Exits when stop_event is set."""
        while not self._stop_event.is_set():
            try:
                self.tick()
            except Exception:
                logger.exception("backup_scheduler_tick_exception")
            self._stop_event.wait(timeout=self._poll_interval)

    def _run(self, manual: bool) -> BackupSlot | None:
        if not self._in_flight.acquire(blocking=False):
            logger.info("backup_already_in_progress", extra={"manual": manual})
            return None
        try:
            session = self._session_factory()
            try:
                slot = self._snapshot_if_due(session, manual)
                session.commit()
                return slot
            except Exception:
                session.rollback()
                logger.exception("backup_snapshot_failed", extra={"manual": manual})
                if manual:
                    raise
                return None
            finally:
                session.close()
        finally:
            self._in_flight.release()

    def _snapshot_if_due(self, session: Session, manual: bool) -> BackupSlot | None:
        settings = SettingsService(session, self._clock).get_auto_backup()
        snapshots = SnapshotService(session, self._clock)

        if not manual:
            if not settings.enabled:
                return None
            newest = snapshots.newest_slot()
            if not should_snapshot(
                newest.created_at if newest else None,
                self._clock.now(),
                settings.interval_minutes,
            ):
                return None

        return snapshots.create_snapshot(settings.max_backups)
