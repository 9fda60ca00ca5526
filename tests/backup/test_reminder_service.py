"""
Tests for BackupReminderService.
"""

from datetime import timedelta

import pytest

from payroll_backup.services.reminder_service import BackupReminderService


@pytest.fixture
def reminders(session, clock):
    return BackupReminderService(session, clock)


def test_disabled_by_default(reminders):
    status = reminders.status()
    assert not status.is_due
    assert not status.show_reminder
    assert status.days_since_last_backup is None


def test_enabled_without_backup_is_due(reminders):
    reminders.configure(enabled=True)
    status = reminders.status()
    assert status.is_due
    assert status.show_reminder


def test_record_backup_resets_due(reminders, clock):
    reminders.configure(enabled=True, frequency_days=7)
    reminders.record_backup()
    assert not reminders.status().is_due

    clock.advance_days(7)
    status = reminders.status()
    assert status.days_since_last_backup == 7
    assert status.is_due


def test_dismiss_hides_for_a_day(reminders, clock):
    reminders.configure(enabled=True, frequency_days=1)
    reminders.dismiss()
    assert reminders.status().is_due
    assert not reminders.status().show_reminder

    clock.advance(int(timedelta(hours=24).total_seconds()))
    assert reminders.status().show_reminder


def test_record_backup_clears_dismissal(reminders, clock):
    reminders.configure(enabled=True)
    reminders.dismiss()
    settings = reminders.record_backup()
    assert settings.last_reminder_dismissed is None
    assert settings.last_backup_date == clock.now()


def test_invalid_frequency(reminders):
    with pytest.raises(ValueError):
        reminders.configure(frequency_days=3)
