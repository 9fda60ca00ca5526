"""
Module: payroll_kernel.db.types
Responsibility: Column types and helpers for monetary amounts and timestamps.
    Centralizes precision and rounding so every model and service handles
    money identically.
Architecture position: Kernel > DB.  May be imported by models/, domain/,
    services/, and selectors/.  MUST NOT import from any of those layers.

Invariants enforced:
    - No floats for money.  MoneyString persists Decimal as its exact string
      form; SQLite has no native decimal type and REAL would round.
    - Timestamps are stored as naive UTC and always read back timezone-aware.

Failure modes:
    - ValueError on non-numeric or non-finite input to money_from_str()
      and to_money().
"""

from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation

from sqlalchemy import DateTime, String
from sqlalchemy.types import TypeDecorator


class MoneyString(TypeDecorator):
    """Decimal stored as a canonical string, read back without loss."""

    impl = String(40)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(Decimal(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(value)


class UTCDateTime(TypeDecorator):
    """Timezone-aware datetime normalized to UTC on the way in and out."""

    impl = DateTime(timezone=False)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError(f"Naive datetime not allowed: {value!r}")
        return value.astimezone(UTC).replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return value.replace(tzinfo=UTC)


ZERO = Decimal("0")


def _finite(amount: Decimal, raw: object) -> Decimal:
    if not amount.is_finite():
        raise ValueError(f"Invalid monetary amount: {raw!r}")
    return amount


def money_from_str(value: str) -> Decimal:
    """
    Parse a monetary amount.

    Raises:
        ValueError: If the string is not a finite number (NaN and
            Infinity are rejected).
    """
    try:
        amount = Decimal(value)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid monetary amount: {value!r}") from exc
    return _finite(amount, value)


def to_money(value: Decimal | int | str | float) -> Decimal:
    """Coerce a caller-supplied number to a finite Decimal (floats via their repr)."""
    if isinstance(value, Decimal):
        return _finite(value, value)
    if isinstance(value, float):
        return _finite(Decimal(repr(value)), value)
    return money_from_str(str(value))
