"""
Service layer for monthly salaries and payment recording.

Responsibility:
    - ``compute_monthly_salary``: one SalaryPayment per (employee, month,
      year).  Idempotent: a second call returns the stored payment as is.
    - ``generate_monthly_salaries``: the same for every active employee,
      best-effort, one SAVEPOINT per employee.
    - ``record_payment``: cumulative, monotonic payment recording.
    - ``recalculate_payment``: the only way a stored snapshot changes.

Invariants enforced:
    - total_advances counts APPROVED advances of the employee and period only.
    - net_salary is never negative.
    - amount_paid never decreases; status only moves pending -> partial -> paid.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError

from payroll_kernel.db.base import new_id
from payroll_kernel.domain.dtos import (
    EmployeeStatus,
    PaymentStatus,
    SalaryPayment,
)
from payroll_kernel.domain.salary import (
    apply_payment,
    new_salary_payment,
    period_errors,
    recalculate_payment,
)
from payroll_kernel.domain.validation import (
    parse_amount,
    raise_for_errors,
    validate_payment_form,
)
from payroll_kernel.exceptions import (
    NegativePaymentAmountError,
    PayrollKernelError,
)
from payroll_kernel.logging_config import LogContext, get_logger
from payroll_kernel.services.base import BaseService
from payroll_kernel.services.record_store import RecordStore

logger = get_logger("services.salary")


@dataclass(frozen=True)
class SalaryGenerationResult:
    """Outcome of a monthly batch generation."""
    month: int
    year: int
    created: tuple[SalaryPayment, ...] = ()
    existing: tuple[SalaryPayment, ...] = ()
    skipped_employee_ids: tuple[str, ...] = ()
    warnings: tuple[str, ...] = field(default_factory=tuple)

    @property
    def created_count(self) -> int:
        return len(self.created)

    @property
    def payments(self) -> tuple[SalaryPayment, ...]:
        return self.created + self.existing


def _check_period(month: int, year: int) -> None:
    raise_for_errors(period_errors(month, year))


class SalaryService(BaseService):
    """Monthly salary computation and payment recording."""

    def __init__(self, session, clock=None):
        super().__init__(session, clock)
        self.store = RecordStore(session, self.clock)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get(self, payment_id: str) -> SalaryPayment:
        """
        Raises:
            SalaryPaymentNotFoundError: If the payment doesn't exist.
        """
        return self.store.require("salaryPayments", payment_id)

    def find_payment(self, employee_id: str, month: int, year: int) -> SalaryPayment | None:
        matches = self.store.get_all_by_index(
            "salaryPayments", "by-employee-period", (employee_id, month, year)
        )
        return matches[0] if matches else None

    def list_payments(
        self,
        month: int | None = None,
        year: int | None = None,
        employee_id: str | None = None,
        status: PaymentStatus | None = None,
    ) -> list[SalaryPayment]:
        if month is not None and year is not None:
            payments = self.store.get_all_by_index("salaryPayments", "by-month-year", (month, year))
        elif employee_id is not None:
            payments = self.store.get_all_by_index("salaryPayments", "by-employee", employee_id)
        else:
            payments = self.store.get_all("salaryPayments")

        return [
            p for p in payments
            if (month is None or p.month == month)
            and (year is None or p.year == year)
            and (employee_id is None or p.employee_id == employee_id)
            and (status is None or p.status == status)
        ]

    # -------------------------------------------------------------------------
    # Computation
    # -------------------------------------------------------------------------

    def compute_monthly_salary(self, employee_id: str, month: int, year: int) -> SalaryPayment:
        """
        Get or create the salary payment of one employee for one period.

        An existing payment is returned unchanged (no recomputation, paid
        amount untouched).  Otherwise the employee's current salary
        components and approved advances of the period are snapshotted
        into a new pending payment.

        Raises:
            EmployeeNotFoundError: If the employee doesn't exist.
            FormValidationError: If month/year are out of range.
        """
        _check_period(month, year)
        employee = self.store.require("employees", employee_id)

        existing = self.find_payment(employee_id, month, year)
        if existing is not None:
            logger.debug(
                "salary_payment_exists",
                extra={"payment_id": existing.id, "employee_id": employee_id},
            )
            return existing

        advances = self.store.get_all_by_index("advances", "by-employee", employee_id)
        payment = new_salary_payment(
            new_id(), employee, month, year, advances, self.clock.now()
        )
        self.store.add("salaryPayments", payment)

        with LogContext.bind(period=f"{year}-{month:02d}"):
            logger.info(
                "salary_payment_computed",
                extra={
                    "payment_id": payment.id,
                    "employee_id": employee_id,
                    "net_salary": payment.net_salary,
                    "total_advances": payment.total_advances,
                },
            )
        return payment

    def generate_monthly_salaries(self, month: int, year: int) -> SalaryGenerationResult:
        """
        Compute the period's salary for every active employee.

        Best-effort: each employee runs in its own SAVEPOINT; a failure is
        rolled back, reported as a warning, and the loop continues.
        Inactive and suspended employees are skipped.  Already computed
        payments are returned under ``existing``, never recomputed.
        """
        _check_period(month, year)

        created: list[SalaryPayment] = []
        existing: list[SalaryPayment] = []
        skipped: list[str] = []
        warnings: list[str] = []

        for employee in self.store.get_all("employees"):
            if employee.status != EmployeeStatus.ACTIVE:
                skipped.append(employee.id)
                continue

            already = self.find_payment(employee.id, month, year)
            if already is not None:
                existing.append(already)
                continue

            try:
                with self.session.begin_nested():
                    created.append(self.compute_monthly_salary(employee.id, month, year))
            except (PayrollKernelError, SQLAlchemyError) as exc:
                warnings.append(f"{employee.matricule}: {exc}")
                logger.warning(
                    "salary_generation_item_failed",
                    extra={"employee_id": employee.id, "error": str(exc)},
                )

        result = SalaryGenerationResult(
            month=month,
            year=year,
            created=tuple(created),
            existing=tuple(existing),
            skipped_employee_ids=tuple(skipped),
            warnings=tuple(warnings),
        )
        logger.info(
            "salary_generation_completed",
            extra={
                "period": f"{year}-{month:02d}",
                "created_count": len(created),
                "existing": len(existing),
                "skipped": len(skipped),
                "failed": len(warnings),
            },
        )
        return result

    def recalculate_payment(self, payment_id: str) -> SalaryPayment:
        """
        Refresh a payment's snapshot from the employee's current salary and
        the period's approved advances.  ``amount_paid`` is kept.

        Raises:
            SalaryPaymentNotFoundError, EmployeeNotFoundError
        """
        payment = self.get(payment_id)
        employee = self.store.require("employees", payment.employee_id)
        advances = self.store.get_all_by_index("advances", "by-employee", employee.id)

        updated = recalculate_payment(payment, employee, advances, self.clock.now())
        self.store.update("salaryPayments", updated)

        logger.info(
            "salary_payment_recalculated",
            extra={
                "payment_id": payment_id,
                "old_net_salary": payment.net_salary,
                "new_net_salary": updated.net_salary,
                "status": updated.status.value,
            },
        )
        return updated

    # -------------------------------------------------------------------------
    # Payments
    # -------------------------------------------------------------------------

    def record_payment(
        self,
        payment_id: str,
        amount: Decimal | int | str,
        notes: str | None = None,
    ) -> SalaryPayment:
        """
        Add ``amount`` to the payment's cumulative amount paid.

        Sets payment_date to now; replaces notes only when ``notes`` is given.
        The amount is not clamped to the remaining balance.

        Raises:
            SalaryPaymentNotFoundError: If the payment doesn't exist.
            NegativePaymentAmountError: If ``amount`` is below zero.
            FormValidationError: If ``amount`` is not a number or notes are
                too long.
        """
        value = parse_amount(amount, "amount")
        payment = self.get(payment_id)
        if value < 0:
            raise NegativePaymentAmountError(payment_id, value)
        raise_for_errors(validate_payment_form(value, notes))

        updated = apply_payment(payment, value, self.clock.now(), notes)
        self.store.update("salaryPayments", updated)

        logger.info(
            "salary_payment_recorded",
            extra={
                "payment_id": payment_id,
                "amount": value,
                "amount_paid": updated.amount_paid,
                "remaining_amount": updated.remaining_amount,
                "status": updated.status.value,
            },
        )
        return updated

    def delete_payment(self, payment_id: str) -> bool:
        deleted = self.store.delete("salaryPayments", payment_id)
        if deleted:
            logger.info("salary_payment_deleted", extra={"payment_id": payment_id})
        return deleted
