"""
Pure backup policy functions.

Contract:
    Every function here is PURE -- no I/O, no clock reads.  Callers pass
    ``now`` from their Clock.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Iterable

from payroll_config.schema import BackupReminderSettings

REMINDER_SNOOZE = timedelta(hours=24)
_BYTE_UNITS = ("B", "KB", "MB", "GB")


def slot_id_for(now: datetime) -> str:
    """``backup_<epoch milliseconds>``."""
    return f"backup_{int(now.timestamp() * 1000)}"


def plan_rotation(slots: Iterable[tuple[str, datetime]], max_backups: int) -> tuple[str, ...]:
    """
    Ids to evict so that at most ``max_backups`` slots remain.

    ``slots`` are ``(id, created_at)`` pairs in any order; the oldest go
    first.  Ties on created_at are broken by id.
    """
    if max_backups < 1:
        raise ValueError(f"max_backups must be at least 1, got {max_backups}")
    newest_first = sorted(slots, key=lambda s: (s[1], s[0]), reverse=True)
    return tuple(slot_id for slot_id, _ in newest_first[max_backups:])


def should_snapshot(newest: datetime | None, now: datetime, interval_minutes: int) -> bool:
    """True when the ring is empty or its newest slot is an interval old."""
    if newest is None:
        return True
    return now - newest >= timedelta(minutes=interval_minutes)


def days_since_last_backup(settings: BackupReminderSettings, now: datetime) -> int | None:
    if settings.last_backup_date is None:
        return None
    return math.floor((now - settings.last_backup_date) / timedelta(days=1))


def is_backup_due(settings: BackupReminderSettings, now: datetime) -> bool:
    if not settings.enabled:
        return False
    days = days_since_last_backup(settings, now)
    return days is None or days >= settings.frequency_days


def should_show_reminder(settings: BackupReminderSettings, now: datetime) -> bool:
    """Due, and not dismissed within the last 24 hours."""
    if not is_backup_due(settings, now):
        return False
    dismissed = settings.last_reminder_dismissed
    return dismissed is None or now - dismissed >= REMINDER_SNOOZE


def format_bytes(size: int) -> str:
    """
    >>> format_bytes(1536)
    '1.5 KB'
    >>> format_bytes(2048)
    '2 KB'
    """
    if size <= 0:
        return "0 B"
    value = float(size)
    exponent = 0
    while value >= 1024 and exponent < len(_BYTE_UNITS) - 1:
        value /= 1024
        exponent += 1
    text = f"{value:.1f}".removesuffix(".0")
    return f"{text} {_BYTE_UNITS[exponent]}"
