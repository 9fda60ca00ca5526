"""
Module: payroll_kernel.models.employee
Responsibility: ORM persistence for the ``Employee`` DTO.

Invariants enforced:
    - ``matricule`` is unique (uq_employee_matricule).
    - ``status`` stores the EmployeeStatus .value string.
    - Salary components are Decimal (MoneyString) -- NEVER float.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from payroll_kernel.db.base import TrackedBase
from payroll_kernel.domain.dtos import Employee, EmployeeStatus


class EmployeeModel(TrackedBase):
    """ORM model for ``Employee``."""

    __tablename__ = "employees"

    matricule: Mapped[str] = mapped_column(String(50), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    phone: Mapped[str] = mapped_column(String(50), default="", nullable=False)
    address: Mapped[str] = mapped_column(String(500), default="", nullable=False)
    date_of_birth: Mapped[date | None] = mapped_column(nullable=True)
    hire_date: Mapped[date | None] = mapped_column(nullable=True)
    position: Mapped[str] = mapped_column(String(100), default="", nullable=False)
    department: Mapped[str] = mapped_column(String(100), default="", nullable=False)
    base_salary: Mapped[Decimal] = mapped_column(nullable=False)
    bonus: Mapped[Decimal] = mapped_column(nullable=False)
    deductions: Mapped[Decimal] = mapped_column(nullable=False)
    photo: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False)

    __table_args__ = (
        UniqueConstraint("matricule", name="uq_employee_matricule"),
        Index("idx_employee_department", "department"),
        Index("idx_employee_status", "status"),
    )

    def to_dto(self) -> Employee:
        return Employee(
            id=self.id,
            matricule=self.matricule,
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
            phone=self.phone,
            address=self.address,
            date_of_birth=self.date_of_birth,
            hire_date=self.hire_date,
            position=self.position,
            department=self.department,
            base_salary=self.base_salary,
            bonus=self.bonus,
            deductions=self.deductions,
            photo=self.photo,
            status=EmployeeStatus(self.status),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_dto(cls, dto: Employee) -> "EmployeeModel":
        return cls(
            id=dto.id,
            matricule=dto.matricule,
            first_name=dto.first_name,
            last_name=dto.last_name,
            email=dto.email,
            phone=dto.phone,
            address=dto.address,
            date_of_birth=dto.date_of_birth,
            hire_date=dto.hire_date,
            position=dto.position,
            department=dto.department,
            base_salary=dto.base_salary,
            bonus=dto.bonus,
            deductions=dto.deductions,
            photo=dto.photo,
            status=dto.status.value,
            created_at=dto.created_at,
            updated_at=dto.updated_at,
        )

    def __repr__(self) -> str:
        return (
            f"<EmployeeModel {self.matricule}: "
            f"{self.first_name} {self.last_name} ({self.status})>"
        )
