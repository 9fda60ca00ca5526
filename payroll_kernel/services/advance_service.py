"""
Service layer for salary advances.

Advances move through ``ADVANCE_WORKFLOW``: they are created pending,
approved or rejected once, and an approved advance may later be marked
repaid.  Only approved advances reduce the net salary of their period.

Editing or deleting an advance never rewrites salary payments that were
already computed; those keep their ``total_advances`` snapshot until
``SalaryService.recalculate_payment`` is called.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Any

from payroll_kernel.db.base import new_id
from payroll_kernel.domain.advance_lifecycle import EDITABLE_STATUSES, next_status
from payroll_kernel.domain.dtos import Advance, AdvanceStatus
from payroll_kernel.domain.validation import (
    parse_amount,
    raise_for_errors,
    validate_advance_form,
)
from payroll_kernel.exceptions import (
    AdvanceNotEditableError,
    InvalidAdvanceTransitionError,
)
from payroll_kernel.logging_config import LogContext, get_logger
from payroll_kernel.services.base import BaseService
from payroll_kernel.services.record_store import RecordStore

logger = get_logger("services.advance")

_EDITABLE_FIELDS = frozenset(
    {"employee_id", "amount", "reason", "request_date", "month", "year", "notes"}
)


class AdvanceService(BaseService):
    """Advance requests and their approval lifecycle."""

    def __init__(self, session, clock=None):
        super().__init__(session, clock)
        self.store = RecordStore(session, self.clock)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get(self, advance_id: str) -> Advance:
        """
        Raises:
            AdvanceNotFoundError: If the advance doesn't exist.
        """
        return self.store.require("advances", advance_id)

    def list_advances(
        self,
        employee_id: str | None = None,
        status: AdvanceStatus | None = None,
        month: int | None = None,
        year: int | None = None,
    ) -> list[Advance]:
        if employee_id is not None:
            advances = self.store.get_all_by_index("advances", "by-employee", employee_id)
        elif status is not None:
            advances = self.store.get_all_by_index("advances", "by-status", status)
        else:
            advances = self.store.get_all("advances")

        return [
            a for a in advances
            if (status is None or a.status == status)
            and (month is None or a.month == month)
            and (year is None or a.year == year)
        ]

    def approved_for_period(self, employee_id: str, month: int, year: int) -> list[Advance]:
        return self.list_advances(
            employee_id=employee_id,
            status=AdvanceStatus.APPROVED,
            month=month,
            year=year,
        )

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def create(
        self,
        *,
        employee_id: str,
        amount: Decimal | int | str,
        reason: str,
        month: int,
        year: int,
        request_date: date | None = None,
        notes: str | None = None,
    ) -> Advance:
        """
        Request an advance.  The status is always pending on creation.

        Raises:
            EmployeeNotFoundError: If the employee doesn't exist.
            FormValidationError: If a field fails validation.
        """
        self.store.require("employees", employee_id)

        now = self.clock.now()
        advance = Advance(
            id=new_id(),
            employee_id=employee_id,
            amount=parse_amount(amount, "amount"),
            reason=reason.strip(),
            request_date=request_date or now.date(),
            month=month,
            year=year,
            status=AdvanceStatus.PENDING,
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        raise_for_errors(validate_advance_form(advance))
        self.store.add("advances", advance)

        logger.info(
            "advance_requested",
            extra={
                "advance_id": advance.id,
                "employee_id": employee_id,
                "amount": advance.amount,
                "period": f"{year}-{month:02d}",
            },
        )
        return advance

    def update(self, advance_id: str, **changes: Any) -> Advance:
        """
        Edit a pending advance.

        Raises:
            AdvanceNotFoundError, AdvanceNotEditableError, FormValidationError
        """
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise TypeError(f"Advance fields cannot be edited: {sorted(unknown)}")

        existing = self.get(advance_id)
        if existing.status not in EDITABLE_STATUSES:
            raise AdvanceNotEditableError(advance_id, existing.status.value)
        if "employee_id" in changes:
            self.store.require("employees", changes["employee_id"])
        if "amount" in changes:
            changes["amount"] = parse_amount(changes["amount"], "amount")

        updated = replace(existing, **changes, updated_at=self.clock.now())
        raise_for_errors(validate_advance_form(updated))
        self.store.update("advances", updated)

        logger.info(
            "advance_updated",
            extra={"advance_id": advance_id, "fields": sorted(changes)},
        )
        return updated

    def approve(self, advance_id: str) -> Advance:
        """pending -> approved; stamps approval_date."""
        return self._transition(advance_id, "approve")

    def reject(self, advance_id: str) -> Advance:
        """pending -> rejected."""
        return self._transition(advance_id, "reject")

    def mark_repaid(self, advance_id: str) -> Advance:
        """approved -> repaid."""
        return self._transition(advance_id, "mark_repaid")

    def delete(self, advance_id: str) -> bool:
        """
        Delete an advance in any status.  Unknown ids are a no-op.

        Salary payments that already counted it are left unchanged.
        """
        deleted = self.store.delete("advances", advance_id)
        if deleted:
            logger.info("advance_deleted", extra={"advance_id": advance_id})
        return deleted

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _transition(self, advance_id: str, action: str) -> Advance:
        advance = self.get(advance_id)
        target = next_status(advance.status, action)
        if target is None:
            raise InvalidAdvanceTransitionError(advance_id, advance.status.value, action)

        now = self.clock.now()
        updated = replace(
            advance,
            status=target,
            approval_date=now if target == AdvanceStatus.APPROVED else advance.approval_date,
            updated_at=now,
        )
        self.store.update("advances", updated)

        with LogContext.bind(record_id=advance_id, collection="advances"):
            logger.info(
                "advance_status_changed",
                extra={
                    "action": action,
                    "from_status": advance.status.value,
                    "to_status": target.value,
                    "employee_id": advance.employee_id,
                },
            )
        return updated
