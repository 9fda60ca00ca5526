"""
Module: payroll_kernel.models.local_storage
Responsibility: Key/value settings blobs and the automatic backup ring.

Neither table is part of the exported record collections: a backup never
contains settings or other backups.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from payroll_kernel.db.base import Base
from payroll_kernel.domain.dtos import BackupSlot


class LocalSettingModel(Base):
    """One settings blob per key (``app_settings``, ``auto_backup``, ...)."""

    __tablename__ = "local_settings"

    # id is the settings key
    value: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(nullable=False)

    def __repr__(self) -> str:
        return f"<LocalSettingModel {self.id}>"


class BackupSlotModel(Base):
    """A serialized snapshot held in the backup ring."""

    __tablename__ = "backup_slots"

    created_at: Mapped[datetime] = mapped_column(nullable=False)
    size_bytes: Mapped[int] = mapped_column(nullable=False)
    record_counts: Mapped[dict[str, int]] = mapped_column(JSON, nullable=False)
    payload: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (Index("idx_backup_slot_created", "created_at"),)

    def to_dto(self, include_payload: bool = True) -> BackupSlot:
        return BackupSlot(
            id=self.id,
            created_at=self.created_at,
            size_bytes=self.size_bytes,
            record_counts=dict(self.record_counts),
            payload=self.payload if include_payload else "",
        )

    @classmethod
    def from_dto(cls, dto: BackupSlot) -> "BackupSlotModel":
        return cls(
            id=dto.id,
            created_at=dto.created_at,
            size_bytes=dto.size_bytes,
            record_counts=dict(dto.record_counts),
            payload=dto.payload,
        )

    def __repr__(self) -> str:
        return f"<BackupSlotModel {self.id} {self.size_bytes}B>"
