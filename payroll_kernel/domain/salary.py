"""
Monthly salary arithmetic -- pure functions, ZERO I/O.

    gross     = base_salary + bonus
    advances  = sum of APPROVED advances of the employee for (month, year)
    net       = max(0, gross - deductions - advances)
    remaining = max(0, net - amount_paid)

Status of a payment is derived from what remains, never stored
independently of the amounts:

    remaining == 0        -> paid
    0 < amount_paid       -> partial
    otherwise             -> pending

A freshly computed payment always starts pending with nothing paid.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Iterable

from payroll_kernel.db.types import ZERO
from payroll_kernel.domain.dtos import (
    Advance,
    AdvanceStatus,
    Employee,
    PaymentStatus,
    SalaryBreakdown,
    SalaryPayment,
    ValidationError,
)

MONTHS: tuple[str, ...] = (
    "Janvier",
    "Février",
    "Mars",
    "Avril",
    "Mai",
    "Juin",
    "Juillet",
    "Août",
    "Septembre",
    "Octobre",
    "Novembre",
    "Décembre",
)

MIN_YEAR = 2020
MAX_YEAR = 2100


def month_name(month: int) -> str:
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    return MONTHS[month - 1]


def period_label(month: int, year: int) -> str:
    """Localized period label, e.g. ``Mars 2024``."""
    return f"{month_name(month)} {year}"


def period_errors(month: int, year: int) -> list[ValidationError]:
    """Errors for a month outside 1..12 or a year outside the supported range."""
    errors: list[ValidationError] = []
    if not 1 <= month <= 12:
        errors.append(ValidationError(
            code="OUT_OF_RANGE", message="Mois invalide", field="month",
            details={"min": 1, "max": 12},
        ))
    if not MIN_YEAR <= year <= MAX_YEAR:
        errors.append(ValidationError(
            code="OUT_OF_RANGE", message="Année invalide", field="year",
            details={"min": MIN_YEAR, "max": MAX_YEAR},
        ))
    return errors


def total_approved_advances(
    advances: Iterable[Advance],
    employee_id: str,
    month: int,
    year: int,
) -> Decimal:
    """Sum of approved advances of one employee for one period."""
    return sum(
        (
            a.amount
            for a in advances
            if a.status == AdvanceStatus.APPROVED
            and a.employee_id == employee_id
            and a.month == month
            and a.year == year
        ),
        ZERO,
    )


def net_salary(
    base_salary: Decimal,
    bonus: Decimal,
    deductions: Decimal,
    total_advances: Decimal,
) -> Decimal:
    """Net salary, floored at zero."""
    return max(ZERO, base_salary + bonus - deductions - total_advances)


def remaining_amount(net: Decimal, amount_paid: Decimal) -> Decimal:
    return max(ZERO, net - amount_paid)


def derive_payment_status(net: Decimal, amount_paid: Decimal) -> PaymentStatus:
    """Settlement status for a cumulative ``amount_paid`` against ``net``."""
    if remaining_amount(net, amount_paid) <= ZERO:
        return PaymentStatus.PAID
    if amount_paid > ZERO:
        return PaymentStatus.PARTIAL
    return PaymentStatus.PENDING


def compute_salary_breakdown(
    employee: Employee,
    month: int,
    year: int,
    advances: Iterable[Advance],
) -> SalaryBreakdown:
    """
    Salary figures for a new payment of ``employee`` for (month, year).

    Advances of other employees, other periods, or not approved are ignored,
    so callers may pass an unfiltered list.
    """
    advances_total = total_approved_advances(advances, employee.id, month, year)
    net = net_salary(
        employee.base_salary, employee.bonus, employee.deductions, advances_total
    )
    return SalaryBreakdown(
        gross_salary=employee.base_salary + employee.bonus,
        total_advances=advances_total,
        net_salary=net,
        remaining_amount=net,
        status=PaymentStatus.PENDING,
    )


def new_salary_payment(
    payment_id: str,
    employee: Employee,
    month: int,
    year: int,
    advances: Iterable[Advance],
    now: datetime,
) -> SalaryPayment:
    """Snapshot the employee's salary components into a pending payment."""
    breakdown = compute_salary_breakdown(employee, month, year, advances)
    return SalaryPayment(
        id=payment_id,
        employee_id=employee.id,
        month=month,
        year=year,
        base_salary=employee.base_salary,
        bonus=employee.bonus,
        deductions=employee.deductions,
        total_advances=breakdown.total_advances,
        net_salary=breakdown.net_salary,
        amount_paid=ZERO,
        remaining_amount=breakdown.remaining_amount,
        status=breakdown.status,
        created_at=now,
        updated_at=now,
    )


def apply_payment(
    payment: SalaryPayment,
    amount: Decimal,
    now: datetime,
    notes: str | None = None,
) -> SalaryPayment:
    """
    Add ``amount`` to what has been paid.

    The amount is not clamped to the remaining balance; over-payment leaves
    remaining at zero.  Existing notes are kept unless new ones are given.
    """
    if amount < ZERO:
        raise ValueError(f"Payment amount must be >= 0, got {amount}")
    paid = payment.amount_paid + amount
    return replace(
        payment,
        amount_paid=paid,
        remaining_amount=remaining_amount(payment.net_salary, paid),
        status=derive_payment_status(payment.net_salary, paid),
        payment_date=now,
        notes=notes if notes is not None else payment.notes,
        updated_at=now,
    )


def recalculate_payment(
    payment: SalaryPayment,
    employee: Employee,
    advances: Iterable[Advance],
    now: datetime,
) -> SalaryPayment:
    """
    Re-snapshot salary components and approved advances.

    ``amount_paid`` is kept; remaining and status are re-derived from it.
    """
    breakdown = compute_salary_breakdown(employee, payment.month, payment.year, advances)
    status = (
        derive_payment_status(breakdown.net_salary, payment.amount_paid)
        if payment.amount_paid > ZERO or payment.status == PaymentStatus.PAID
        else PaymentStatus.PENDING
    )
    return replace(
        payment,
        base_salary=employee.base_salary,
        bonus=employee.bonus,
        deductions=employee.deductions,
        total_advances=breakdown.total_advances,
        net_salary=breakdown.net_salary,
        remaining_amount=remaining_amount(breakdown.net_salary, payment.amount_paid),
        status=status,
        updated_at=now,
    )


def salary_slip_lines(payment: SalaryPayment) -> list[tuple[str, Decimal]]:
    """Labelled amounts printed on a salary receipt, in display order."""
    return [
        ("Salaire de base", payment.base_salary),
        ("Prime", payment.bonus),
        ("Salaire brut", payment.gross_salary),
        ("Déductions", payment.deductions),
        ("Avances", payment.total_advances),
        ("Salaire net", payment.net_salary),
        ("Montant payé", payment.amount_paid),
        ("Reste à payer", payment.remaining_amount),
    ]
