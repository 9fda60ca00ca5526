"""
Module: payroll_kernel.models.receipt
Responsibility: ORM persistence for issued ``Receipt`` records.

Receipts are immutable once issued; they carry only ``created_at``.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from payroll_kernel.db.base import Base
from payroll_kernel.domain.dtos import Receipt, ReceiptType


class ReceiptModel(Base):
    """ORM model for ``Receipt``."""

    __tablename__ = "receipts"

    receipt_number: Mapped[str] = mapped_column(String(50), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    employee_id: Mapped[str] = mapped_column(String(64), nullable=False)
    employee_name: Mapped[str] = mapped_column(String(255), nullable=False)
    employee_matricule: Mapped[str] = mapped_column(String(50), nullable=False)
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    month: Mapped[int | None] = mapped_column(nullable=True)
    year: Mapped[int | None] = mapped_column(nullable=True)
    payment_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    advance_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    signature: Mapped[str | None] = mapped_column(Text, nullable=True)
    signature_date: Mapped[datetime | None] = mapped_column(nullable=True)
    created_at: Mapped[datetime] = mapped_column(nullable=False)

    __table_args__ = (
        Index("idx_receipt_employee", "employee_id"),
        Index("idx_receipt_type", "type"),
    )

    def to_dto(self) -> Receipt:
        return Receipt(
            id=self.id,
            receipt_number=self.receipt_number,
            type=ReceiptType(self.type),
            employee_id=self.employee_id,
            employee_name=self.employee_name,
            employee_matricule=self.employee_matricule,
            amount=self.amount,
            description=self.description,
            month=self.month,
            year=self.year,
            payment_id=self.payment_id,
            advance_id=self.advance_id,
            signature=self.signature,
            signature_date=self.signature_date,
            created_at=self.created_at,
        )

    @classmethod
    def from_dto(cls, dto: Receipt) -> "ReceiptModel":
        return cls(
            id=dto.id,
            receipt_number=dto.receipt_number,
            type=dto.type.value,
            employee_id=dto.employee_id,
            employee_name=dto.employee_name,
            employee_matricule=dto.employee_matricule,
            amount=dto.amount,
            description=dto.description,
            month=dto.month,
            year=dto.year,
            payment_id=dto.payment_id,
            advance_id=dto.advance_id,
            signature=dto.signature,
            signature_date=dto.signature_date,
            created_at=dto.created_at,
        )

    def __repr__(self) -> str:
        return f"<ReceiptModel {self.receipt_number} ({self.type}): {self.amount}>"
