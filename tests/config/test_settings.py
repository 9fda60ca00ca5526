"""
Tests for payroll_config: schema, YAML loader, settings service, formatting.
"""

from datetime import UTC, datetime
from decimal import Decimal

import pytest
import yaml
from sqlalchemy.exc import OperationalError

from payroll_config.formatting import format_amount
from payroll_config.loader import load_seed_settings, parse_seed_settings
from payroll_config.schema import (
    DEFAULT_DEPARTMENTS,
    AppSettings,
    AutoBackupSettings,
    BackupReminderSettings,
    SeedSettings,
)
from payroll_config.service import SettingsBroadcaster, SettingsService
from payroll_kernel.exceptions import StorageError


@pytest.fixture
def settings_service(session, clock):
    return SettingsService(session, clock)


class TestSchema:
    def test_defaults(self):
        app = AppSettings()
        assert app.company_name == "VOTRE ENTREPRISE"
        assert (app.currency, app.currency_symbol, app.locale) == ("MGA", "Ar", "fr-MG")
        assert app.departments == DEFAULT_DEPARTMENTS
        assert AutoBackupSettings().interval_seconds == 1800
        assert BackupReminderSettings().frequency_days == 7

    def test_merged_validates(self):
        with pytest.raises(ValueError):
            AppSettings().merged({"currency": "ARIARY"})
        with pytest.raises(ValueError):
            AutoBackupSettings().merged({"interval_minutes": 10})
        with pytest.raises(ValueError):
            AutoBackupSettings().merged({"max_backups": 0})

    def test_merged_rejects_unknown_keys(self):
        with pytest.raises(ValueError):
            AppSettings().merged({"colour": "blue"})

    def test_from_dict_ignores_unknown_keys(self, captured_logs):
        settings = AutoBackupSettings.from_dict({"enabled": True, "legacy": 1})
        assert settings.enabled
        assert any(r["message"] == "settings_unknown_keys_ignored" for r in captured_logs())

    def test_lists_become_tuples_and_back(self):
        app = AppSettings().merged({"departments": ["Direction", "Atelier"]})
        assert app.departments == ("Direction", "Atelier")
        assert app.to_dict()["departments"] == ["Direction", "Atelier"]

    def test_reminder_dates_round_trip(self):
        stamp = datetime(2024, 3, 1, 8, 30, tzinfo=UTC)
        settings = BackupReminderSettings(last_backup_date=stamp)
        data = settings.to_dict()
        assert data["last_backup_date"] == "2024-03-01T08:30:00+00:00"
        assert BackupReminderSettings.from_dict(data) == settings


class TestLoader:
    def test_load_sections(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text(yaml.safe_dump({
            "app": {"company_name": "ACME SARL"},
            "auto_backup": {"enabled": True, "interval_minutes": 15},
        }), encoding="utf-8")

        seed = load_seed_settings(path)
        assert seed.app.company_name == "ACME SARL"
        assert seed.app.currency == "MGA"
        assert seed.auto_backup == AutoBackupSettings(enabled=True, interval_minutes=15)
        assert seed.backup_reminder == BackupReminderSettings()

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_seed_settings(path) == SeedSettings()

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_seed_settings(path)

    @pytest.mark.parametrize(
        "data",
        [
            {"payroll": {}},
            {"app": ["x"]},
            {"app": {"unknown": 1}},
            {"backup_reminder": {"frequency_days": 3}},
        ],
    )
    def test_invalid(self, data):
        with pytest.raises(ValueError):
            parse_seed_settings(data)


class TestSettingsService:
    def test_get_returns_defaults_when_nothing_stored(self, settings_service):
        assert settings_service.get() == AppSettings()

    def test_update_persists_and_broadcasts(self, session, clock, settings_service):
        received = []
        settings_service.subscribe(received.append)

        updated = settings_service.update(company_name="ACME SARL", currency_symbol="MGA")
        assert received == [updated]
        assert SettingsService(session, clock).get().company_name == "ACME SARL"

    def test_invalid_update_changes_nothing(self, settings_service):
        received = []
        settings_service.subscribe(received.append)
        with pytest.raises(ValueError):
            settings_service.update(currency="XX")
        assert received == []
        assert settings_service.get() == AppSettings()

    def test_unsubscribe(self, settings_service):
        received = []
        unsubscribe = settings_service.subscribe(received.append)
        unsubscribe()
        unsubscribe()
        settings_service.update(company_name="ACME")
        assert received == []
        assert settings_service.broadcaster.listener_count == 0

    def test_failing_listener_does_not_stop_others(self, settings_service, captured_logs):
        received = []

        def broken(settings):
            raise RuntimeError("boom")

        settings_service.subscribe(broken)
        settings_service.subscribe(received.append)
        settings_service.update(company_name="ACME")

        assert len(received) == 1
        failures = [r for r in captured_logs() if r["message"] == "settings_listener_failed"]
        assert failures and failures[0]["level"] == "ERROR"

    def test_shared_broadcaster(self, session, clock):
        broadcaster = SettingsBroadcaster()
        received = []
        broadcaster.subscribe(received.append)
        SettingsService(session, clock, broadcaster).update(company_phone="+261 20 22 000 00")
        assert received[0].company_phone == "+261 20 22 000 00"

    def test_reset(self, settings_service):
        received = []
        settings_service.update(company_name="ACME")
        settings_service.subscribe(received.append)

        assert settings_service.reset() == AppSettings()
        assert settings_service.get() == AppSettings()
        assert received == [AppSettings()]

    def test_backup_settings_are_independent(self, settings_service):
        settings_service.update_auto_backup(enabled=True, max_backups=3)
        settings_service.update_backup_reminder(frequency_days=14)

        assert settings_service.get_auto_backup() == AutoBackupSettings(enabled=True, max_backups=3)
        assert settings_service.get_backup_reminder().frequency_days == 14
        assert settings_service.get() == AppSettings()

    def test_seed_keeps_existing_unless_overwrite(self, settings_service):
        settings_service.update(company_name="Existing")
        seed = SeedSettings(
            app=AppSettings(company_name="Seeded"),
            auto_backup=AutoBackupSettings(enabled=True),
        )

        settings_service.seed(seed)
        assert settings_service.get().company_name == "Existing"
        assert settings_service.get_auto_backup().enabled

        settings_service.seed(seed, overwrite=True)
        assert settings_service.get().company_name == "Seeded"

    def test_storage_failure_surfaces(self, settings_service, session, monkeypatch):
        def locked(*args, **kwargs):
            raise OperationalError("UPDATE", {}, Exception("database is locked"))

        monkeypatch.setattr(session, "flush", locked)
        with pytest.raises(StorageError) as exc_info:
            settings_service.update(company_name="ACME")
        assert exc_info.value.operation == "write_settings"


@pytest.mark.parametrize(
    "amount,expected",
    [
        (Decimal("1250000"), "1 250 000 Ar"),
        (Decimal("999.5"), "1 000 Ar"),
        (0, "0 Ar"),
        (Decimal("-25000"), "-25 000 Ar"),
    ],
)
def test_format_amount(amount, expected):
    assert format_amount(amount) == expected


def test_format_amount_uses_symbol():
    assert format_amount(1500, AppSettings(currency="EUR", currency_symbol="€")) == "1 500 €"
