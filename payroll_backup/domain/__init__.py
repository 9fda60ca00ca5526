"""Pure backup policy functions (no I/O)."""

from payroll_backup.domain.policy import (
    days_since_last_backup,
    format_bytes,
    is_backup_due,
    plan_rotation,
    should_show_reminder,
    should_snapshot,
    slot_id_for,
)

__all__ = [
    "days_since_last_backup",
    "format_bytes",
    "is_backup_due",
    "plan_rotation",
    "should_show_reminder",
    "should_snapshot",
    "slot_id_for",
]
