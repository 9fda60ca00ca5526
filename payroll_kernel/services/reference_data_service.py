"""
Service layer for the department and position lookups.

Department names are unique.  A position may be scoped to a department
(by name); deleting a department deletes the positions scoped to it.
Employees keep their department/position text either way.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable

from payroll_kernel.db.base import new_id
from payroll_kernel.domain.dtos import Department, Position, ValidationError
from payroll_kernel.domain.validation import raise_for_errors
from payroll_kernel.exceptions import DepartmentNotFoundError
from payroll_kernel.logging_config import get_logger
from payroll_kernel.services.base import BaseService
from payroll_kernel.services.record_store import RecordStore

logger = get_logger("services.reference_data")


def _check_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise_for_errors([ValidationError(code="REQUIRED", message="Le nom est requis", field="name")])
    return cleaned


class ReferenceDataService(BaseService):
    """Departments and positions."""

    def __init__(self, session, clock=None):
        super().__init__(session, clock)
        self.store = RecordStore(session, self.clock)

    # -------------------------------------------------------------------------
    # Departments
    # -------------------------------------------------------------------------

    def list_departments(self) -> list[Department]:
        return sorted(self.store.get_all("departments"), key=lambda d: d.name)

    def get_department(self, department_id: str) -> Department:
        return self.store.require("departments", department_id)

    def find_department(self, name: str) -> Department | None:
        matches = self.store.get_all_by_index("departments", "by-name", name.strip())
        return matches[0] if matches else None

    def add_department(self, name: str, description: str | None = None) -> Department:
        """
        Raises:
            DuplicateDepartmentError: If the name is already used.
        """
        now = self.clock.now()
        department = Department(
            id=new_id(),
            name=_check_name(name),
            description=description,
            created_at=now,
            updated_at=now,
        )
        self.store.add("departments", department)
        logger.info("department_added", extra={"department_id": department.id, "department": department.name})
        return department

    def update_department(
        self,
        department_id: str,
        name: str,
        description: str | None = None,
    ) -> Department:
        """
        Rename / redescribe a department.  Positions scoped to the old name
        follow the rename.

        Raises:
            DepartmentNotFoundError, DuplicateDepartmentError
        """
        existing = self.get_department(department_id)
        updated = replace(
            existing,
            name=_check_name(name),
            description=description,
            updated_at=self.clock.now(),
        )
        self.store.update("departments", updated)

        if updated.name != existing.name:
            for position in self.list_positions(existing.name):
                self.store.update(
                    "positions",
                    replace(position, department=updated.name, updated_at=updated.updated_at),
                )

        logger.info(
            "department_updated",
            extra={"department_id": department_id, "department": updated.name},
        )
        return updated

    def delete_department(self, department_id: str) -> int:
        """
        Delete a department and its scoped positions.

        Returns the number of positions removed; unknown ids are a no-op.
        """
        department = self.store.get("departments", department_id)
        if department is None:
            return 0
        positions = self.list_positions(department.name)
        for position in positions:
            self.store.delete("positions", position.id)
        self.store.delete("departments", department_id)

        logger.info(
            "department_deleted",
            extra={"department_id": department_id, "positions_deleted": len(positions)},
        )
        return len(positions)

    def seed_departments(self, names: Iterable[str]) -> list[Department]:
        """Add each name not already present (used on first start)."""
        return [
            self.add_department(name)
            for name in names
            if self.find_department(name) is None
        ]

    # -------------------------------------------------------------------------
    # Positions
    # -------------------------------------------------------------------------

    def list_positions(self, department: str | None = None) -> list[Position]:
        if department is None:
            positions = self.store.get_all("positions")
        else:
            positions = self.store.get_all_by_index("positions", "by-department", department)
        return sorted(positions, key=lambda p: p.name)

    def get_position(self, position_id: str) -> Position:
        return self.store.require("positions", position_id)

    def add_position(
        self,
        name: str,
        department: str | None = None,
        description: str | None = None,
    ) -> Position:
        """
        Raises:
            DepartmentNotFoundError: If ``department`` names no department.
        """
        self._check_department(department)
        now = self.clock.now()
        position = Position(
            id=new_id(),
            name=_check_name(name),
            department=department,
            description=description,
            created_at=now,
            updated_at=now,
        )
        self.store.add("positions", position)
        logger.info("position_added", extra={"position_id": position.id, "department": department})
        return position

    def update_position(
        self,
        position_id: str,
        name: str,
        department: str | None = None,
        description: str | None = None,
    ) -> Position:
        existing = self.get_position(position_id)
        self._check_department(department)
        updated = replace(
            existing,
            name=_check_name(name),
            department=department,
            description=description,
            updated_at=self.clock.now(),
        )
        self.store.update("positions", updated)
        logger.info("position_updated", extra={"position_id": position_id})
        return updated

    def delete_position(self, position_id: str) -> bool:
        deleted = self.store.delete("positions", position_id)
        if deleted:
            logger.info("position_deleted", extra={"position_id": position_id})
        return deleted

    def _check_department(self, department: str | None) -> None:
        if department is not None and self.find_department(department) is None:
            raise DepartmentNotFoundError(department)
