"""
Payroll Domain DTOs (``payroll_kernel.domain.dtos``).

Responsibility
--------------
Frozen dataclass value objects for the nouns of the payroll ledger:
employees, advances, salary payments, receipts, and the department /
position lookups, plus the backup bundle and validation results.

Architecture position
---------------------
**Kernel domain layer** -- pure data definitions with ZERO I/O.  Returned by
every service and consumed by the ingestion codecs.

Invariants enforced
-------------------
* All DTOs are ``frozen=True``; updates go through ``dataclasses.replace``.
* All monetary fields use ``Decimal`` -- NEVER ``float``.
* Timestamps are timezone-aware UTC.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any


class EmployeeStatus(Enum):
    """Employment status; only ACTIVE employees get monthly salaries."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class AdvanceStatus(Enum):
    """Advance lifecycle states."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    REPAID = "repaid"


class PaymentStatus(Enum):
    """Derived settlement state of a salary payment."""
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"


class ReceiptType(Enum):
    SALARY = "salary"
    ADVANCE = "advance"


@dataclass(frozen=True)
class Employee:
    """An employee record keyed by id, with a unique matricule."""
    id: str
    matricule: str
    first_name: str
    last_name: str
    base_salary: Decimal
    created_at: datetime
    updated_at: datetime
    bonus: Decimal = Decimal("0")
    deductions: Decimal = Decimal("0")
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    email: str = ""
    phone: str = ""
    address: str = ""
    date_of_birth: date | None = None
    hire_date: date | None = None
    position: str = ""
    department: str = ""
    photo: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_active(self) -> bool:
        return self.status == EmployeeStatus.ACTIVE


@dataclass(frozen=True)
class Advance:
    """A salary advance request against one (month, year)."""
    id: str
    employee_id: str
    amount: Decimal
    reason: str
    request_date: date
    month: int
    year: int
    created_at: datetime
    updated_at: datetime
    status: AdvanceStatus = AdvanceStatus.PENDING
    approval_date: datetime | None = None
    notes: str | None = None


@dataclass(frozen=True)
class SalaryPayment:
    """
    Salary for one employee and one period.

    base_salary / bonus / deductions / total_advances are snapshots taken at
    computation time; they are not refreshed when the employee or the
    advances change later.
    """
    id: str
    employee_id: str
    month: int
    year: int
    base_salary: Decimal
    bonus: Decimal
    deductions: Decimal
    total_advances: Decimal
    net_salary: Decimal
    amount_paid: Decimal
    remaining_amount: Decimal
    status: PaymentStatus
    created_at: datetime
    updated_at: datetime
    payment_date: datetime | None = None
    notes: str | None = None

    @property
    def gross_salary(self) -> Decimal:
        return self.base_salary + self.bonus


@dataclass(frozen=True)
class Receipt:
    """A printable receipt issued for a salary payment or an advance."""
    id: str
    receipt_number: str
    type: ReceiptType
    employee_id: str
    employee_name: str
    employee_matricule: str
    amount: Decimal
    description: str
    created_at: datetime
    month: int | None = None
    year: int | None = None
    payment_id: str | None = None
    advance_id: str | None = None
    signature: str | None = None
    signature_date: datetime | None = None


@dataclass(frozen=True)
class Department:
    id: str
    name: str
    created_at: datetime
    updated_at: datetime
    description: str | None = None


@dataclass(frozen=True)
class Position:
    id: str
    name: str
    created_at: datetime
    updated_at: datetime
    department: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class SalaryBreakdown:
    """Pure result of the monthly salary computation."""
    gross_salary: Decimal
    total_advances: Decimal
    net_salary: Decimal
    remaining_amount: Decimal
    status: PaymentStatus


COLLECTIONS: tuple[str, ...] = (
    "employees",
    "advances",
    "salaryPayments",
    "receipts",
    "departments",
    "positions",
)


@dataclass(frozen=True)
class BackupBundle:
    """
    Every record of every collection, as exported by the record store.

    The JSON form is ``{employees, advances, salaryPayments, receipts,
    departments, positions}``.
    """
    employees: tuple[Employee, ...] = ()
    advances: tuple[Advance, ...] = ()
    salary_payments: tuple[SalaryPayment, ...] = ()
    receipts: tuple[Receipt, ...] = ()
    departments: tuple[Department, ...] = ()
    positions: tuple[Position, ...] = ()

    def records(self, collection: str) -> tuple[Any, ...]:
        """Records of one collection by its external name."""
        attribute = "salary_payments" if collection == "salaryPayments" else collection
        return getattr(self, attribute)

    @property
    def record_counts(self) -> dict[str, int]:
        return {name: len(self.records(name)) for name in COLLECTIONS}

    @property
    def total_records(self) -> int:
        return sum(self.record_counts.values())


@dataclass(frozen=True)
class BackupSlot:
    """One entry of the automatic backup ring: a serialized BackupBundle."""
    id: str
    created_at: datetime
    size_bytes: int
    record_counts: dict[str, int]
    payload: str = field(repr=False, default="")


@dataclass(frozen=True)
class ValidationError:
    """
    A single validation error.

    Carries a machine-readable code, human-readable message, and the form
    field it applies to.
    """

    code: str
    message: str
    field: str | None = None
    details: dict[str, Any] | None = None
