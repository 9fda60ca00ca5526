"""
Dashboard figures derived from the stored records.

All amounts are recomputed on every call; nothing here is cached or stored.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy import select

from payroll_kernel.db.types import ZERO
from payroll_kernel.domain.dtos import AdvanceStatus, EmployeeStatus
from payroll_kernel.models import AdvanceModel, EmployeeModel, SalaryPaymentModel
from payroll_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class DashboardStats:
    month: int
    year: int
    total_employees: int
    active_employees: int
    total_monthly_salary: Decimal
    pending_advances: int
    pending_advances_amount: Decimal
    paid_this_month: Decimal
    remaining_to_pay: Decimal
    employees_by_department: dict[str, int] = field(default_factory=dict)


class DashboardSelector(BaseSelector):

    def stats(self, month: int, year: int) -> DashboardStats:
        """
        Headline figures for the given period.

        ``total_monthly_salary`` is base + bonus - deductions summed over
        active employees (advances not subtracted).  ``paid_this_month`` and
        ``remaining_to_pay`` cover the salary payments of (month, year).
        """
        employees = self.session.execute(select(EmployeeModel)).scalars().all()
        active = [e for e in employees if e.status == EmployeeStatus.ACTIVE.value]

        pending = self.session.execute(
            select(AdvanceModel).where(AdvanceModel.status == AdvanceStatus.PENDING.value)
        ).scalars().all()

        payments = self.session.execute(
            select(SalaryPaymentModel).where(
                SalaryPaymentModel.month == month,
                SalaryPaymentModel.year == year,
            )
        ).scalars().all()

        by_department = Counter(e.department for e in active)

        return DashboardStats(
            month=month,
            year=year,
            total_employees=len(employees),
            active_employees=len(active),
            total_monthly_salary=sum(
                (e.base_salary + e.bonus - e.deductions for e in active), ZERO
            ),
            pending_advances=len(pending),
            pending_advances_amount=sum((a.amount for a in pending), ZERO),
            paid_this_month=sum((p.amount_paid for p in payments), ZERO),
            remaining_to_pay=sum((p.remaining_amount for p in payments), ZERO),
            employees_by_department=dict(by_department.most_common()),
        )
