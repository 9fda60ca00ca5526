"""
Tests for BackupScheduler.

Uses a file-backed database: every tick opens its own session, as the
background thread does.
"""

import time

import pytest

from payroll_backup.services.scheduler import BackupScheduler
from payroll_backup.services.snapshot_service import SnapshotService
from payroll_config.service import SettingsService


@pytest.fixture
def configure(file_session_factory, clock):
    def _configure(**partial):
        session = file_session_factory()
        try:
            SettingsService(session, clock).update_auto_backup(**partial)
            session.commit()
        finally:
            session.close()

    return _configure


@pytest.fixture
def slot_ids(file_session_factory, clock):
    def _slot_ids():
        session = file_session_factory()
        try:
            return [s.id for s in SnapshotService(session, clock).list_slots()]
        finally:
            session.close()

    return _slot_ids


@pytest.fixture
def scheduler(file_session_factory, clock):
    sched = BackupScheduler(file_session_factory, clock, poll_interval_seconds=0.05)
    yield sched
    sched.stop(timeout=5)


class TestTick:
    def test_disabled_does_nothing(self, scheduler, slot_ids):
        assert scheduler.tick() is None
        assert slot_ids() == []

    def test_empty_ring_snapshots_immediately(self, scheduler, configure, slot_ids):
        configure(enabled=True)
        slot = scheduler.tick()
        assert slot is not None
        assert slot_ids() == [slot.id]

    def test_fresh_ring_is_left_alone(self, scheduler, configure, clock, slot_ids):
        configure(enabled=True, interval_minutes=15)
        scheduler.tick()
        clock.advance_minutes(14)
        assert scheduler.tick() is None
        clock.advance_minutes(1)
        assert scheduler.tick() is not None
        assert len(slot_ids()) == 2

    def test_ring_trimmed_to_max(self, scheduler, configure, clock, slot_ids):
        configure(enabled=True, interval_minutes=5, max_backups=2)
        taken = []
        for _ in range(4):
            taken.append(scheduler.tick().id)
            clock.advance_minutes(5)
        assert slot_ids() == list(reversed(taken[-2:]))


class TestBackupNow:
    def test_ignores_enabled_flag(self, scheduler, slot_ids):
        slot = scheduler.backup_now()
        assert slot_ids() == [slot.id]

    def test_coalesces_while_in_flight(self, scheduler, slot_ids, captured_logs):
        scheduler._in_flight.acquire()
        try:
            assert scheduler.is_backing_up
            assert scheduler.backup_now() is None
            assert scheduler.tick() is None
        finally:
            scheduler._in_flight.release()
        assert not scheduler.is_backing_up
        assert slot_ids() == []
        assert any(r["message"] == "backup_already_in_progress" for r in captured_logs())

    def test_failure_reraised_and_rolled_back(self, scheduler, monkeypatch, slot_ids):
        def boom(self, max_backups):
            raise RuntimeError("disk full")

        monkeypatch.setattr(SnapshotService, "create_snapshot", boom)
        with pytest.raises(RuntimeError):
            scheduler.backup_now()
        assert not scheduler.is_backing_up

    def test_scheduled_failure_is_logged(self, scheduler, configure, monkeypatch, captured_logs):
        configure(enabled=True)

        def boom(self, max_backups):
            raise RuntimeError("disk full")

        monkeypatch.setattr(SnapshotService, "create_snapshot", boom)
        assert scheduler.tick() is None
        assert any(r["message"] == "backup_snapshot_failed" for r in captured_logs())


class TestLifecycle:
    def test_start_runs_first_tick(self, scheduler, configure, slot_ids):
        configure(enabled=True)
        scheduler.start()
        assert scheduler.is_running

        deadline = time.monotonic() + 5
        while not slot_ids() and time.monotonic() < deadline:
            time.sleep(0.02)
        scheduler.stop(timeout=5)

        assert not scheduler.is_running
        assert len(slot_ids()) == 1

    def test_start_twice_is_noop(self, scheduler):
        scheduler.start()
        thread = scheduler._thread
        scheduler.start()
        assert scheduler._thread is thread
