"""
Module: payroll_kernel.models.advance
Responsibility: ORM persistence for the ``Advance`` DTO.

Invariants enforced:
    - ``status`` stores the AdvanceStatus .value string.
    - ``employee_id`` is a plain indexed reference; employee deletion
      cascades through EmployeeService, not the database.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from payroll_kernel.db.base import TrackedBase
from payroll_kernel.domain.dtos import Advance, AdvanceStatus


class AdvanceModel(TrackedBase):
    """ORM model for ``Advance``."""

    __tablename__ = "advances"

    employee_id: Mapped[str] = mapped_column(String(64), nullable=False)
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    reason: Mapped[str] = mapped_column(String(500), nullable=False)
    request_date: Mapped[date] = mapped_column(nullable=False)
    month: Mapped[int] = mapped_column(nullable=False)
    year: Mapped[int] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    approval_date: Mapped[datetime | None] = mapped_column(nullable=True)
    notes: Mapped[str | None] = mapped_column(String(500), nullable=True)

    __table_args__ = (
        Index("idx_advance_employee", "employee_id"),
        Index("idx_advance_status", "status"),
        Index("idx_advance_period", "month", "year"),
    )

    def to_dto(self) -> Advance:
        return Advance(
            id=self.id,
            employee_id=self.employee_id,
            amount=self.amount,
            reason=self.reason,
            request_date=self.request_date,
            month=self.month,
            year=self.year,
            status=AdvanceStatus(self.status),
            approval_date=self.approval_date,
            notes=self.notes,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_dto(cls, dto: Advance) -> "AdvanceModel":
        return cls(
            id=dto.id,
            employee_id=dto.employee_id,
            amount=dto.amount,
            reason=dto.reason,
            request_date=dto.request_date,
            month=dto.month,
            year=dto.year,
            status=dto.status.value,
            approval_date=dto.approval_date,
            notes=dto.notes,
            created_at=dto.created_at,
            updated_at=dto.updated_at,
        )

    def __repr__(self) -> str:
        return f"<AdvanceModel {self.employee_id} {self.month}/{self.year}: {self.amount} ({self.status})>"
