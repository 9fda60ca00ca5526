"""
Module: payroll_kernel.models.reference
Responsibility: ORM persistence for the Department and Position lookups.

Invariants enforced:
    - Department names are unique (uq_department_name).
    - ``Position.department`` is the department name it is scoped to, or
      NULL for positions available everywhere.
"""

from sqlalchemy import Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from payroll_kernel.db.base import TrackedBase
from payroll_kernel.domain.dtos import Department, Position


class DepartmentModel(TrackedBase):
    __tablename__ = "departments"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    __table_args__ = (UniqueConstraint("name", name="uq_department_name"),)

    def to_dto(self) -> Department:
        return Department(
            id=self.id,
            name=self.name,
            description=self.description,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_dto(cls, dto: Department) -> "DepartmentModel":
        return cls(
            id=dto.id,
            name=dto.name,
            description=dto.description,
            created_at=dto.created_at,
            updated_at=dto.updated_at,
        )

    def __repr__(self) -> str:
        return f"<DepartmentModel {self.name}>"


class PositionModel(TrackedBase):
    __tablename__ = "positions"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    department: Mapped[str | None] = mapped_column(String(100), nullable=True)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    __table_args__ = (Index("idx_position_department", "department"),)

    def to_dto(self) -> Position:
        return Position(
            id=self.id,
            name=self.name,
            department=self.department,
            description=self.description,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_dto(cls, dto: Position) -> "PositionModel":
        return cls(
            id=dto.id,
            name=dto.name,
            department=dto.department,
            description=dto.description,
            created_at=dto.created_at,
            updated_at=dto.updated_at,
        )

    def __repr__(self) -> str:
        return f"<PositionModel {self.name} ({self.department or '*'})>"
