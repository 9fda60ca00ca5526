"""Backup services: snapshot ring, scheduler, reminder."""

from payroll_backup.services.reminder_service import (
    BackupReminderService,
    ReminderStatus,
)
from payroll_backup.services.scheduler import BackupScheduler
from payroll_backup.services.snapshot_service import SnapshotService

__all__ = [
    "BackupReminderService",
    "BackupScheduler",
    "ReminderStatus",
    "SnapshotService",
]
