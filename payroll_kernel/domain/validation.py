"""
Form validators for employees, advances, and payments.

Two levels for employees:

* ``validate_employee_record`` -- the invariants every stored employee
  satisfies (used by the CSV import, which only requires names and salary).
* ``validate_employee_form`` -- the full data-entry form rules on top.

Validators return ``ValidationError`` lists; services turn a non-empty list
into ``FormValidationError``.  ZERO I/O.
"""

from __future__ import annotations

import re
from decimal import Decimal

from payroll_kernel.db.types import ZERO, to_money
from payroll_kernel.domain.dtos import Advance, Employee, ValidationError
from payroll_kernel.domain.salary import period_errors
from payroll_kernel.exceptions import FormValidationError

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

NAME_MIN, NAME_MAX = 2, 50
PHONE_MIN, PHONE_MAX = 8, 20
ADDRESS_MAX = 200
REASON_MIN, REASON_MAX = 5, 500
NOTES_MAX = 500


def _required(value: object, field: str, message: str) -> list[ValidationError]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return [ValidationError(code="REQUIRED", message=message, field=field)]
    return []


def _length(
    value: str | None,
    field: str,
    *,
    min_len: int = 0,
    max_len: int | None = None,
    message: str | None = None,
) -> list[ValidationError]:
    text = value or ""
    if len(text) < min_len:
        return [ValidationError(
            code="TOO_SHORT",
            message=message or f"Au moins {min_len} caractères",
            field=field,
            details={"min": min_len, "length": len(text)},
        )]
    if max_len is not None and len(text) > max_len:
        return [ValidationError(
            code="TOO_LONG",
            message=f"Au plus {max_len} caractères",
            field=field,
            details={"max": max_len, "length": len(text)},
        )]
    return []


def _non_negative(value: Decimal, field: str, message: str) -> list[ValidationError]:
    if value < ZERO:
        return [ValidationError(code="NEGATIVE_AMOUNT", message=message, field=field)]
    return []


def validate_employee_record(employee: Employee) -> list[ValidationError]:
    """Invariants of any stored employee."""
    errors: list[ValidationError] = []
    errors += _required(employee.matricule, "matricule", "Le matricule est requis")
    errors += _required(employee.first_name, "first_name", "Le prénom est requis")
    errors += _required(employee.last_name, "last_name", "Le nom est requis")
    errors += _non_negative(employee.base_salary, "base_salary", "Le salaire doit être positif")
    errors += _non_negative(employee.bonus, "bonus", "La prime doit être positive")
    errors += _non_negative(
        employee.deductions, "deductions", "Les déductions doivent être positives"
    )
    return errors


def validate_employee_form(employee: Employee) -> list[ValidationError]:
    """Full employee form rules."""
    errors = validate_employee_record(employee)
    errors += _length(
        employee.first_name, "first_name", min_len=NAME_MIN, max_len=NAME_MAX,
        message="Le prénom doit contenir au moins 2 caractères",
    )
    errors += _length(
        employee.last_name, "last_name", min_len=NAME_MIN, max_len=NAME_MAX,
        message="Le nom doit contenir au moins 2 caractères",
    )
    if employee.email and not _EMAIL_RE.match(employee.email):
        errors.append(ValidationError(code="INVALID_EMAIL", message="Email invalide", field="email"))
    errors += _length(
        employee.phone, "phone", min_len=PHONE_MIN, max_len=PHONE_MAX,
        message="Le téléphone doit contenir au moins 8 chiffres",
    )
    errors += _length(employee.address, "address", max_len=ADDRESS_MAX)
    errors += _required(
        employee.date_of_birth, "date_of_birth", "La date de naissance est requise"
    )
    errors += _required(employee.hire_date, "hire_date", "La date d'embauche est requise")
    errors += _required(employee.position, "position", "Le poste est requis")
    errors += _required(employee.department, "department", "Le département est requis")
    return _dedupe(errors)


def validate_advance_form(advance: Advance) -> list[ValidationError]:
    errors: list[ValidationError] = []
    errors += _required(advance.employee_id, "employee_id", "L'employé est requis")
    if advance.amount <= ZERO:
        errors.append(ValidationError(
            code="NON_POSITIVE_AMOUNT",
            message="Le montant doit être supérieur à 0",
            field="amount",
        ))
    errors += _length(
        advance.reason, "reason", min_len=REASON_MIN, max_len=REASON_MAX,
        message="La raison doit contenir au moins 5 caractères",
    )
    errors += period_errors(advance.month, advance.year)
    errors += _length(advance.notes, "notes", max_len=NOTES_MAX)
    return errors


def validate_payment_form(amount: Decimal, notes: str | None = None) -> list[ValidationError]:
    errors = _non_negative(amount, "amount", "Le montant doit être positif")
    errors += _length(notes, "notes", max_len=NOTES_MAX)
    return errors


def _dedupe(errors: list[ValidationError]) -> list[ValidationError]:
    """Keep the first error per field."""
    seen: set[str | None] = set()
    result: list[ValidationError] = []
    for error in errors:
        if error.field in seen:
            continue
        seen.add(error.field)
        result.append(error)
    return result


def raise_for_errors(errors: list[ValidationError]) -> None:
    """Raise FormValidationError when ``errors`` is non-empty."""
    if errors:
        raise FormValidationError(errors)


def parse_amount(value: Decimal | int | str | float, field: str) -> Decimal:
    """
    Coerce a form amount to Decimal.

    Raises:
        FormValidationError: If ``value`` is not a finite number.
    """
    try:
        return to_money(value)
    except ValueError:
        raise FormValidationError([ValidationError(
            code="INVALID_AMOUNT",
            message="Montant invalide",
            field=field,
            details={"value": str(value)},
        )]) from None
