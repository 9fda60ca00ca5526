"""
Settings service (``payroll_config.service``).

Owns the three settings blobs.  ``get_*`` merges the stored blob over the
defaults; ``update_*`` merges a partial update, persists it, and for the
application settings notifies every subscriber straight away.

Subscribers are notified before the caller commits.  A listener that
raises is logged and does not stop the others.
"""

from __future__ import annotations

from threading import Lock
from typing import Any, Callable

from payroll_config.schema import (
    AppSettings,
    AutoBackupSettings,
    BackupReminderSettings,
    SeedSettings,
)
from payroll_config.store import (
    APP_SETTINGS_KEY,
    AUTO_BACKUP_KEY,
    BACKUP_REMINDER_KEY,
    LocalSettingsStore,
)
from payroll_kernel.logging_config import get_logger
from payroll_kernel.services.base import BaseService

logger = get_logger("config.settings")

SettingsListener = Callable[[AppSettings], None]


class SettingsBroadcaster:
    """In-process fan-out of AppSettings changes."""

    def __init__(self):
        self._listeners: list[SettingsListener] = []
        self._lock = Lock()

    def subscribe(self, listener: SettingsListener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that unregisters it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def publish(self, settings: AppSettings) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(settings)
            except Exception:
                logger.exception(
                    "settings_listener_failed",
                    extra={"listener": getattr(listener, "__qualname__", repr(listener))},
                )


class SettingsService(BaseService):

    def __init__(self, session, clock=None, broadcaster: SettingsBroadcaster | None = None):
        super().__init__(session, clock)
        self.store = LocalSettingsStore(session, self.clock)
        self.broadcaster = broadcaster or SettingsBroadcaster()

    def subscribe(self, listener: SettingsListener) -> Callable[[], None]:
        return self.broadcaster.subscribe(listener)

    # -------------------------------------------------------------------------
    # Application settings
    # -------------------------------------------------------------------------

    def get(self) -> AppSettings:
        return AppSettings.from_dict(self.store.get_blob(APP_SETTINGS_KEY))

    def update(self, **partial: Any) -> AppSettings:
        """
        Merge ``partial`` into the current settings and broadcast the result.

        Raises:
            ValueError: On an unknown field or an invalid value.
        """
        settings = self.get().merged(partial)
        self.store.put_blob(APP_SETTINGS_KEY, settings.to_dict())
        logger.info("app_settings_updated", extra={"fields": sorted(partial)})
        self.broadcaster.publish(settings)
        return settings

    def reset(self) -> AppSettings:
        """Back to the defaults; subscribers are notified."""
        self.store.delete_blob(APP_SETTINGS_KEY)
        settings = AppSettings()
        logger.info("app_settings_reset")
        self.broadcaster.publish(settings)
        return settings

    # -------------------------------------------------------------------------
    # Backup settings
    # -------------------------------------------------------------------------

    def get_auto_backup(self) -> AutoBackupSettings:
        return AutoBackupSettings.from_dict(self.store.get_blob(AUTO_BACKUP_KEY))

    def update_auto_backup(self, **partial: Any) -> AutoBackupSettings:
        settings = self.get_auto_backup().merged(partial)
        self.store.put_blob(AUTO_BACKUP_KEY, settings.to_dict())
        logger.info("auto_backup_settings_updated", extra={"fields": sorted(partial)})
        return settings

    def get_backup_reminder(self) -> BackupReminderSettings:
        return BackupReminderSettings.from_dict(self.store.get_blob(BACKUP_REMINDER_KEY))

    def update_backup_reminder(self, **partial: Any) -> BackupReminderSettings:
        settings = self.get_backup_reminder().merged(partial)
        self.store.put_blob(BACKUP_REMINDER_KEY, settings.to_dict())
        logger.debug("backup_reminder_settings_updated", extra={"fields": sorted(partial)})
        return settings

    # -------------------------------------------------------------------------
    # Seeding
    # -------------------------------------------------------------------------

    def seed(self, seed: SeedSettings, overwrite: bool = False) -> None:
        """
        Write seed values for every blob not yet stored (all of them when
        ``overwrite`` is true).
        """
        for key, value in (
            (APP_SETTINGS_KEY, seed.app),
            (AUTO_BACKUP_KEY, seed.auto_backup),
            (BACKUP_REMINDER_KEY, seed.backup_reminder),
        ):
            if overwrite or self.store.get_blob(key) is None:
                self.store.put_blob(key, value.to_dict())
        logger.info("settings_seeded", extra={"overwrite": overwrite})
