"""
BackupReminderService -- "it's time to back up" tracking.

Reads and writes ``BackupReminderSettings`` through SettingsService;
the decisions themselves are the pure functions of
``payroll_backup.domain.policy``.
"""

from __future__ import annotations

from dataclasses import dataclass

from payroll_backup.domain.policy import (
    days_since_last_backup,
    is_backup_due,
    should_show_reminder,
)
from payroll_config.schema import BackupReminderSettings
from payroll_config.service import SettingsService
from payroll_kernel.logging_config import get_logger
from payroll_kernel.services.base import BaseService

logger = get_logger("backup.reminder")


@dataclass(frozen=True)
class ReminderStatus:
    settings: BackupReminderSettings
    is_due: bool
    show_reminder: bool
    days_since_last_backup: int | None


class BackupReminderService(BaseService):

    def __init__(self, session, clock=None):
        super().__init__(session, clock)
        self.settings = SettingsService(session, self.clock)

    def status(self) -> ReminderStatus:
        settings = self.settings.get_backup_reminder()
        now = self.clock.now()
        return ReminderStatus(
            settings=settings,
            is_due=is_backup_due(settings, now),
            show_reminder=should_show_reminder(settings, now),
            days_since_last_backup=days_since_last_backup(settings, now),
        )

    def configure(
        self,
        enabled: bool | None = None,
        frequency_days: int | None = None,
    ) -> BackupReminderSettings:
        """
        Raises:
            ValueError: If ``frequency_days`` is not 1, 7, 14 or 30.
        """
        changes = {}
        if enabled is not None:
            changes["enabled"] = enabled
        if frequency_days is not None:
            changes["frequency_days"] = frequency_days
        return self.settings.update_backup_reminder(**changes)

    def record_backup(self) -> BackupReminderSettings:
        """Stamp a completed manual backup; clears any dismissal."""
        settings = self.settings.update_backup_reminder(
            last_backup_date=self.clock.now(),
            last_reminder_dismissed=None,
        )
        logger.info("backup_recorded", extra={"last_backup_date": settings.last_backup_date})
        return settings

    def dismiss(self) -> BackupReminderSettings:
        """Hide the reminder for the next 24 hours."""
        settings = self.settings.update_backup_reminder(last_reminder_dismissed=self.clock.now())
        logger.info("backup_reminder_dismissed")
        return settings
