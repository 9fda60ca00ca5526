"""
SnapshotService -- the ring of automatic backup slots.

Contract:
    ``create_snapshot`` serializes the whole store (compact JSON), stores
    it as a new slot, then evicts the oldest slots beyond ``max_backups``.
    ``restore_slot`` loads a slot back through ``RecordStore.import_all``.
    Like every service it only flushes; the caller commits.
"""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from payroll_backup.domain.policy import plan_rotation, slot_id_for
from payroll_ingestion.services.backup_file_service import decode_bundle, encode_bundle
from payroll_kernel.domain.dtos import BackupSlot
from payroll_kernel.exceptions import BackupSlotNotFoundError, StorageError
from payroll_kernel.logging_config import get_logger
from payroll_kernel.models.local_storage import BackupSlotModel
from payroll_kernel.services.base import BaseService
from payroll_kernel.services.record_store import RecordStore

logger = get_logger("backup.snapshot")


class SnapshotService(BaseService):

    def __init__(self, session, clock=None):
        super().__init__(session, clock)
        self.store = RecordStore(session, self.clock)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def list_slots(self) -> list[BackupSlot]:
        """Slots newest first, without their payload."""
        rows = self.session.execute(
            select(BackupSlotModel).order_by(
                BackupSlotModel.created_at.desc(), BackupSlotModel.id.desc()
            )
        ).scalars().all()
        return [row.to_dto(include_payload=False) for row in rows]

    def newest_slot(self) -> BackupSlot | None:
        slots = self.list_slots()
        return slots[0] if slots else None

    def get_slot(self, slot_id: str) -> BackupSlot:
        """
        Raises:
            BackupSlotNotFoundError: If no slot has that id.
        """
        row = self.session.get(BackupSlotModel, slot_id)
        if row is None:
            raise BackupSlotNotFoundError(slot_id)
        return row.to_dto()

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def create_snapshot(self, max_backups: int) -> BackupSlot:
        """Snapshot the store into a new slot and trim the ring."""
        now = self.clock.now()
        bundle = self.store.export_all()
        payload = encode_bundle(bundle, pretty=False)

        slot_id = slot_id_for(now)
        suffix = 1
        while self.session.get(BackupSlotModel, slot_id) is not None:
            slot_id = f"{slot_id_for(now)}_{suffix}"
            suffix += 1

        slot = BackupSlot(
            id=slot_id,
            created_at=now,
            size_bytes=len(payload.encode("utf-8")),
            record_counts=bundle.record_counts,
            payload=payload,
        )
        try:
            self.session.add(BackupSlotModel.from_dto(slot))
            self.session.flush()
        except SQLAlchemyError as exc:
            raise StorageError("create_snapshot", str(exc)) from exc

        evicted = self._rotate(max_backups)
        logger.info(
            "backup_snapshot_created",
            extra={
                "slot_id": slot.id,
                "size_bytes": slot.size_bytes,
                "record_count": bundle.total_records,
                "evicted": list(evicted),
            },
        )
        return slot

    def restore_slot(self, slot_id: str, replace: bool = False) -> dict[str, int]:
        """
        Load a slot back into the store; ``replace`` empties it first.

        Raises:
            BackupSlotNotFoundError, ImportParseError, DuplicateKeyError
        """
        slot = self.get_slot(slot_id)
        bundle = decode_bundle(slot.payload, source=slot_id)
        if replace:
            self.store.clear_all()
        counts = self.store.import_all(bundle)
        logger.info(
            "backup_snapshot_restored",
            extra={"slot_id": slot_id, "replace": replace, "record_counts": counts},
        )
        return counts

    def delete_slot(self, slot_id: str) -> bool:
        row = self.session.get(BackupSlotModel, slot_id)
        if row is None:
            return False
        self.session.delete(row)
        self.session.flush()
        logger.info("backup_snapshot_deleted", extra={"slot_id": slot_id})
        return True

    def clear_slots(self) -> int:
        result = self.session.execute(delete(BackupSlotModel))
        count = result.rowcount or 0
        logger.warning("backup_snapshots_cleared", extra={"slot_count": count})
        return count

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _rotate(self, max_backups: int) -> tuple[str, ...]:
        slots = [(s.id, s.created_at) for s in self.list_slots()]
        evicted = plan_rotation(slots, max_backups)
        for slot_id in evicted:
            self.session.delete(self.session.get(BackupSlotModel, slot_id))
        if evicted:
            self.session.flush()
        return evicted
