"""
Key/value store for settings blobs (``payroll_config.store``).

Each blob is a JSON object stored under one key in ``local_settings``.
Reads return ``None`` for a key that was never written.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from payroll_kernel.exceptions import StorageError
from payroll_kernel.models.local_storage import LocalSettingModel
from payroll_kernel.services.base import BaseService

APP_SETTINGS_KEY = "app_settings"
AUTO_BACKUP_KEY = "auto_backup_settings"
BACKUP_REMINDER_KEY = "backup_reminder_settings"


class LocalSettingsStore(BaseService):

    def get_blob(self, key: str) -> dict[str, Any] | None:
        try:
            row = self.session.get(LocalSettingModel, key)
        except SQLAlchemyError as exc:
            raise StorageError("read_settings", str(exc)) from exc
        return dict(row.value) if row is not None else None

    def put_blob(self, key: str, value: dict[str, Any]) -> None:
        try:
            row = self.session.get(LocalSettingModel, key)
            if row is None:
                self.session.add(
                    LocalSettingModel(id=key, value=dict(value), updated_at=self.clock.now())
                )
            else:
                # reassign so the JSON column is marked dirty
                row.value = dict(value)
                row.updated_at = self.clock.now()
            self.session.flush()
        except SQLAlchemyError as exc:
            raise StorageError("write_settings", str(exc)) from exc

    def delete_blob(self, key: str) -> bool:
        try:
            row = self.session.get(LocalSettingModel, key)
            if row is None:
                return False
            self.session.delete(row)
            self.session.flush()
        except SQLAlchemyError as exc:
            raise StorageError("delete_settings", str(exc)) from exc
        return True
