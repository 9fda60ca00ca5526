"""
Module: payroll_kernel.models.salary_payment
Responsibility: ORM persistence for the ``SalaryPayment`` DTO.

Invariants enforced:
    - At most one payment per (employee_id, month, year)
      (uq_salary_payment_period).
    - Snapshot columns are written once at computation time and only
      rewritten by an explicit recalculation.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from payroll_kernel.db.base import TrackedBase
from payroll_kernel.domain.dtos import PaymentStatus, SalaryPayment


class SalaryPaymentModel(TrackedBase):
    """ORM model for ``SalaryPayment``."""

    __tablename__ = "salary_payments"

    employee_id: Mapped[str] = mapped_column(String(64), nullable=False)
    month: Mapped[int] = mapped_column(nullable=False)
    year: Mapped[int] = mapped_column(nullable=False)
    base_salary: Mapped[Decimal] = mapped_column(nullable=False)
    bonus: Mapped[Decimal] = mapped_column(nullable=False)
    deductions: Mapped[Decimal] = mapped_column(nullable=False)
    total_advances: Mapped[Decimal] = mapped_column(nullable=False)
    net_salary: Mapped[Decimal] = mapped_column(nullable=False)
    amount_paid: Mapped[Decimal] = mapped_column(nullable=False)
    remaining_amount: Mapped[Decimal] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    payment_date: Mapped[datetime | None] = mapped_column(nullable=True)
    notes: Mapped[str | None] = mapped_column(String(500), nullable=True)

    __table_args__ = (
        UniqueConstraint("employee_id", "month", "year", name="uq_salary_payment_period"),
        Index("idx_salary_payment_employee", "employee_id"),
        Index("idx_salary_payment_period", "month", "year"),
        Index("idx_salary_payment_status", "status"),
    )

    def to_dto(self) -> SalaryPayment:
        return SalaryPayment(
            id=self.id,
            employee_id=self.employee_id,
            month=self.month,
            year=self.year,
            base_salary=self.base_salary,
            bonus=self.bonus,
            deductions=self.deductions,
            total_advances=self.total_advances,
            net_salary=self.net_salary,
            amount_paid=self.amount_paid,
            remaining_amount=self.remaining_amount,
            status=PaymentStatus(self.status),
            payment_date=self.payment_date,
            notes=self.notes,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_dto(cls, dto: SalaryPayment) -> "SalaryPaymentModel":
        return cls(
            id=dto.id,
            employee_id=dto.employee_id,
            month=dto.month,
            year=dto.year,
            base_salary=dto.base_salary,
            bonus=dto.bonus,
            deductions=dto.deductions,
            total_advances=dto.total_advances,
            net_salary=dto.net_salary,
            amount_paid=dto.amount_paid,
            remaining_amount=dto.remaining_amount,
            status=dto.status.value,
            payment_date=dto.payment_date,
            notes=dto.notes,
            created_at=dto.created_at,
            updated_at=dto.updated_at,
        )

    def __repr__(self) -> str:
        return (
            f"<SalaryPaymentModel {self.employee_id} {self.month}/{self.year}: "
            f"net={self.net_salary} paid={self.amount_paid} ({self.status})>"
        )
