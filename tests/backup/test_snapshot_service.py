"""
Tests for SnapshotService (the backup ring).
"""

import json

import pytest

from payroll_backup.services.snapshot_service import SnapshotService
from payroll_kernel.exceptions import BackupSlotNotFoundError


@pytest.fixture
def snapshots(session, clock):
    return SnapshotService(session, clock)


def test_snapshot_holds_compact_bundle(snapshots, make_employee):
    employee = make_employee()
    slot = snapshots.create_snapshot(max_backups=5)

    stored = snapshots.get_slot(slot.id)
    assert stored.record_counts["employees"] == 1
    assert stored.size_bytes == len(stored.payload.encode("utf-8"))
    assert "\n" not in stored.payload
    assert json.loads(stored.payload)["employees"][0]["id"] == employee.id


def test_list_slots_has_no_payload(snapshots):
    snapshots.create_snapshot(max_backups=5)
    assert snapshots.list_slots()[0].payload == ""


def test_ring_keeps_newest(snapshots, clock):
    created = []
    for _ in range(5):
        created.append(snapshots.create_snapshot(max_backups=3).id)
        clock.advance_minutes(30)

    remaining = [s.id for s in snapshots.list_slots()]
    assert remaining == list(reversed(created[-3:]))
    assert snapshots.newest_slot().id == created[-1]


def test_same_instant_gets_distinct_ids(snapshots):
    first = snapshots.create_snapshot(max_backups=5)
    second = snapshots.create_snapshot(max_backups=5)
    assert first.id != second.id
    assert second.id.startswith(first.id)
    assert len(snapshots.list_slots()) == 2


def test_evictions_logged(snapshots, clock, captured_logs):
    first = snapshots.create_snapshot(max_backups=1)
    clock.advance_minutes(5)
    snapshots.create_snapshot(max_backups=1)

    created = [r for r in captured_logs() if r["message"] == "backup_snapshot_created"]
    assert created[-1]["evicted"] == [first.id]


def test_restore_replaces_store(snapshots, make_employee, employee_service):
    keep = make_employee()
    slot = snapshots.create_snapshot(max_backups=5)
    employee_service.delete(keep.id)
    extra = make_employee()

    counts = snapshots.restore_slot(slot.id, replace=True)
    assert counts["employees"] == 1
    assert [e.id for e in employee_service.list_employees()] == [keep.id]
    assert extra.id not in {e.id for e in employee_service.list_employees()}


def test_restore_merges_by_default(snapshots, make_employee, employee_service):
    keep = make_employee()
    slot = snapshots.create_snapshot(max_backups=5)
    extra = make_employee()

    snapshots.restore_slot(slot.id)
    assert {e.id for e in employee_service.list_employees()} == {keep.id, extra.id}


def test_restore_does_not_touch_ring(snapshots):
    slot = snapshots.create_snapshot(max_backups=5)
    snapshots.restore_slot(slot.id, replace=True)
    assert [s.id for s in snapshots.list_slots()] == [slot.id]


def test_unknown_slot(snapshots):
    with pytest.raises(BackupSlotNotFoundError):
        snapshots.get_slot("backup_0")
    with pytest.raises(BackupSlotNotFoundError):
        snapshots.restore_slot("backup_0")
    assert snapshots.delete_slot("backup_0") is False


def test_delete_and_clear(snapshots, clock):
    first = snapshots.create_snapshot(max_backups=5)
    clock.advance_minutes(5)
    snapshots.create_snapshot(max_backups=5)
    clock.advance_minutes(5)
    snapshots.create_snapshot(max_backups=5)

    assert snapshots.delete_slot(first.id) is True
    assert len(snapshots.list_slots()) == 2
    assert snapshots.clear_slots() == 2
    assert snapshots.newest_slot() is None
