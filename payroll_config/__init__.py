"""
Settings for the payroll kernel: application identity and currency,
automatic backup ring, and backup reminder.
"""

from payroll_config.formatting import format_amount
from payroll_config.loader import load_seed_settings, parse_seed_settings
from payroll_config.schema import (
    DEFAULT_DEPARTMENTS,
    DEFAULT_POSITIONS,
    VALID_BACKUP_INTERVALS,
    VALID_REMINDER_FREQUENCIES,
    AppSettings,
    AutoBackupSettings,
    BackupReminderSettings,
    SeedSettings,
)
from payroll_config.service import SettingsBroadcaster, SettingsService
from payroll_config.store import LocalSettingsStore

__all__ = [
    "AppSettings",
    "AutoBackupSettings",
    "BackupReminderSettings",
    "DEFAULT_DEPARTMENTS",
    "DEFAULT_POSITIONS",
    "LocalSettingsStore",
    "SeedSettings",
    "SettingsBroadcaster",
    "SettingsService",
    "VALID_BACKUP_INTERVALS",
    "VALID_REMINDER_FREQUENCIES",
    "format_amount",
    "load_seed_settings",
    "parse_seed_settings",
]
