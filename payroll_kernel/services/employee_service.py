"""
Service layer for Employee operations.

Creates employees with a unique matricule (generated when not supplied),
merges partial updates into full records, and deletes employees together
with their advances, salary payments, and receipts in the caller's
transaction.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, fields, replace
from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy.orm import Session

from payroll_kernel.db.base import new_id
from payroll_kernel.db.types import ZERO
from payroll_kernel.domain.clock import Clock
from payroll_kernel.domain.dtos import Employee, EmployeeStatus
from payroll_kernel.domain.identifiers import generate_matricule
from payroll_kernel.domain.validation import (
    parse_amount,
    raise_for_errors,
    validate_employee_form,
    validate_employee_record,
)
from payroll_kernel.exceptions import DuplicateMatriculeError
from payroll_kernel.logging_config import get_logger
from payroll_kernel.services.base import BaseService
from payroll_kernel.services.record_store import RecordStore

logger = get_logger("services.employee")

_MONEY_FIELDS = frozenset({"base_salary", "bonus", "deductions"})
_IMMUTABLE_FIELDS = frozenset({"id", "created_at", "updated_at"})
_EMPLOYEE_FIELDS = frozenset(f.name for f in fields(Employee))


@dataclass(frozen=True)
class EmployeeDeletion:
    """What an employee delete removed."""
    employee_id: str
    deleted: bool
    advances: int = 0
    salary_payments: int = 0
    receipts: int = 0


class EmployeeService(BaseService):
    """
    Employee records.

    ``strict=True`` (the default) applies the full data-entry form rules;
    bulk imports pass ``strict=False`` and only the stored-record
    invariants are checked.
    """

    MAX_MATRICULE_ATTEMPTS = 50

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        rng: random.Random | None = None,
    ):
        super().__init__(session, clock)
        self.store = RecordStore(session, self.clock)
        self._rng = rng or random.Random()

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get(self, employee_id: str) -> Employee:
        """
        Raises:
            EmployeeNotFoundError: If the employee doesn't exist.
        """
        return self.store.require("employees", employee_id)

    def find_by_matricule(self, matricule: str) -> Employee | None:
        matches = self.store.get_all_by_index("employees", "by-matricule", matricule)
        return matches[0] if matches else None

    def list_employees(
        self,
        search: str | None = None,
        department: str | None = None,
        status: EmployeeStatus | None = None,
    ) -> list[Employee]:
        """
        Employees, optionally filtered.

        ``search`` matches first name, last name, matricule, or email,
        case-insensitively.
        """
        if status is not None:
            employees = self.store.get_all_by_index("employees", "by-status", status)
        elif department is not None:
            employees = self.store.get_all_by_index("employees", "by-department", department)
        else:
            employees = self.store.get_all("employees")

        if department is not None:
            employees = [e for e in employees if e.department == department]
        if search:
            needle = search.strip().lower()
            employees = [
                e for e in employees
                if needle in e.first_name.lower()
                or needle in e.last_name.lower()
                or needle in e.matricule.lower()
                or needle in e.email.lower()
            ]
        return employees

    def next_matricule(self) -> str:
        """A random ``EMP#####`` matricule not yet used by any employee."""
        for _ in range(self.MAX_MATRICULE_ATTEMPTS):
            candidate = generate_matricule(self._rng)
            if self.find_by_matricule(candidate) is None:
                return candidate
        raise DuplicateMatriculeError(candidate)

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def create(
        self,
        *,
        first_name: str,
        last_name: str,
        base_salary: Decimal | int | str,
        matricule: str | None = None,
        bonus: Decimal | int | str = ZERO,
        deductions: Decimal | int | str = ZERO,
        status: EmployeeStatus = EmployeeStatus.ACTIVE,
        email: str = "",
        phone: str = "",
        address: str = "",
        date_of_birth: date | None = None,
        hire_date: date | None = None,
        position: str = "",
        department: str = "",
        photo: str | None = None,
        employee_id: str | None = None,
        strict: bool = True,
    ) -> Employee:
        """
        Create an employee.

        Raises:
            FormValidationError: If a field fails validation.
            DuplicateMatriculeError: If ``matricule`` is already used.
        """
        now = self.clock.now()
        employee = Employee(
            id=employee_id or new_id(),
            matricule=(matricule or "").strip() or self.next_matricule(),
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            base_salary=parse_amount(base_salary, "base_salary"),
            bonus=parse_amount(bonus, "bonus"),
            deductions=parse_amount(deductions, "deductions"),
            status=EmployeeStatus(status),
            email=email.strip(),
            phone=phone.strip(),
            address=address.strip(),
            date_of_birth=date_of_birth,
            hire_date=hire_date,
            position=position,
            department=department,
            photo=photo,
            created_at=now,
            updated_at=now,
        )
        self._validate(employee, strict)
        self.store.add("employees", employee)

        logger.info(
            "employee_created",
            extra={
                "employee_id": employee.id,
                "matricule": employee.matricule,
                "status": employee.status.value,
            },
        )
        return employee

    def update(self, employee_id: str, *, strict: bool = True, **changes: Any) -> Employee:
        """
        Merge ``changes`` into the stored employee and replace it.

        Salary changes do not touch salary payments already computed; those
        keep their snapshot until explicitly recalculated.

        Raises:
            EmployeeNotFoundError, FormValidationError, DuplicateMatriculeError
        """
        unknown = set(changes) - _EMPLOYEE_FIELDS
        if unknown:
            raise TypeError(f"Unknown employee fields: {sorted(unknown)}")
        frozen = set(changes) & _IMMUTABLE_FIELDS
        if frozen:
            raise TypeError(f"Fields cannot be changed: {sorted(frozen)}")

        existing = self.get(employee_id)
        normalized = {
            k: parse_amount(v, k) if k in _MONEY_FIELDS else v for k, v in changes.items()
        }
        if "status" in normalized:
            normalized["status"] = EmployeeStatus(normalized["status"])
        updated = replace(existing, **normalized, updated_at=self.clock.now())
        self._validate(updated, strict)
        self.store.update("employees", updated)

        logger.info(
            "employee_updated",
            extra={"employee_id": employee_id, "fields": sorted(changes)},
        )
        return updated

    def delete(self, employee_id: str) -> EmployeeDeletion:
        """
        Delete an employee with all their advances, salary payments and
        receipts.  Deleting an unknown id is a no-op.
        """
        if self.store.get("employees", employee_id) is None:
            return EmployeeDeletion(employee_id=employee_id, deleted=False)

        counts = {}
        for collection in ("advances", "salaryPayments", "receipts"):
            dependents = self.store.get_all_by_index(collection, "by-employee", employee_id)
            for record in dependents:
                self.store.delete(collection, record.id)
            counts[collection] = len(dependents)
        self.store.delete("employees", employee_id)

        result = EmployeeDeletion(
            employee_id=employee_id,
            deleted=True,
            advances=counts["advances"],
            salary_payments=counts["salaryPayments"],
            receipts=counts["receipts"],
        )
        logger.info(
            "employee_deleted",
            extra={
                "employee_id": employee_id,
                "advances_deleted": result.advances,
                "salary_payments_deleted": result.salary_payments,
                "receipts_deleted": result.receipts,
            },
        )
        return result

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _validate(self, employee: Employee, strict: bool) -> None:
        if strict:
            raise_for_errors(validate_employee_form(employee))
        else:
            raise_for_errors(validate_employee_record(employee))
