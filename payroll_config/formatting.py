"""Display formatting driven by AppSettings."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from payroll_config.schema import AppSettings


def format_amount(amount: Decimal | int, settings: AppSettings | None = None) -> str:
    """
    Whole currency units, digits grouped by three, then the symbol.

    >>> format_amount(Decimal("1250000"))
    '1 250 000 Ar'
    """
    settings = settings or AppSettings()
    value = Decimal(amount).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    grouped = f"{abs(value):,}".replace(",", " ")
    sign = "-" if value < 0 else ""
    return f"{sign}{grouped} {settings.currency_symbol}"
