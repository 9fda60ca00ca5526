"""Tests for AdvanceService: requests, edits, and the approval lifecycle."""

from datetime import date
from decimal import Decimal

import pytest

from payroll_kernel.domain.dtos import AdvanceStatus
from payroll_kernel.exceptions import (
    AdvanceNotEditableError,
    AdvanceNotFoundError,
    EmployeeNotFoundError,
    FormValidationError,
    InvalidAdvanceTransitionError,
    InvalidStateError,
)


@pytest.fixture
def employee(make_employee):
    return make_employee()


class TestCreate:
    def test_created_pending(self, make_advance, employee, clock):
        advance = make_advance(employee.id)
        assert advance.status == AdvanceStatus.PENDING
        assert advance.request_date == clock.today()
        assert advance.approval_date is None

    def test_unknown_employee(self, advance_service):
        with pytest.raises(EmployeeNotFoundError):
            advance_service.create(
                employee_id="ghost", amount=1000, reason="Loyer du mois", month=3, year=2024
            )

    def test_amount_must_be_positive(self, advance_service, employee):
        with pytest.raises(FormValidationError) as exc_info:
            advance_service.create(
                employee_id=employee.id, amount=0, reason="Loyer du mois", month=3, year=2024
            )
        assert "amount" in exc_info.value.field_errors

    @pytest.mark.parametrize("amount", ["NaN", "Infinity", "beaucoup"])
    def test_amount_must_be_a_number(self, advance_service, employee, amount):
        with pytest.raises(FormValidationError) as exc_info:
            advance_service.create(
                employee_id=employee.id, amount=amount, reason="Loyer du mois", month=3, year=2024
            )
        assert exc_info.value.errors[0].code == "INVALID_AMOUNT"
        assert advance_service.list_advances() == []

    def test_explicit_request_date(self, make_advance, employee):
        advance = make_advance(employee.id, request_date=date(2024, 2, 28))
        assert advance.request_date == date(2024, 2, 28)


class TestLifecycle:
    def test_approve_stamps_approval_date(self, make_advance, advance_service, employee, clock):
        advance = make_advance(employee.id)
        approved = advance_service.approve(advance.id)
        assert approved.status == AdvanceStatus.APPROVED
        assert approved.approval_date == clock.now()

    def test_reject(self, make_advance, advance_service, employee):
        advance = make_advance(employee.id)
        assert advance_service.reject(advance.id).status == AdvanceStatus.REJECTED

    def test_mark_repaid_only_from_approved(self, make_advance, advance_service, employee):
        advance = make_advance(employee.id)
        with pytest.raises(InvalidAdvanceTransitionError):
            advance_service.mark_repaid(advance.id)

        advance_service.approve(advance.id)
        repaid = advance_service.mark_repaid(advance.id)
        assert repaid.status == AdvanceStatus.REPAID
        assert repaid.approval_date is not None

    def test_cannot_decide_twice(self, make_advance, advance_service, employee):
        advance = make_advance(employee.id)
        advance_service.reject(advance.id)
        with pytest.raises(InvalidStateError) as exc_info:
            advance_service.approve(advance.id)
        assert exc_info.value.code == "INVALID_ADVANCE_TRANSITION"
        assert advance_service.get(advance.id).status == AdvanceStatus.REJECTED

    def test_unknown_advance(self, advance_service):
        with pytest.raises(AdvanceNotFoundError):
            advance_service.approve("ghost")

    def test_status_change_logged(self, make_advance, advance_service, employee, captured_logs):
        advance = make_advance(employee.id)
        advance_service.approve(advance.id)
        events = [r for r in captured_logs() if r["message"] == "advance_status_changed"]
        assert events[-1]["to_status"] == "approved"
        assert events[-1]["record_id"] == advance.id


class TestUpdate:
    def test_pending_advance_editable(self, make_advance, advance_service, employee):
        advance = make_advance(employee.id)
        updated = advance_service.update(advance.id, amount="75000", reason="Rentrée scolaire")
        assert updated.amount == Decimal("75000")
        assert updated.reason == "Rentrée scolaire"

    def test_decided_advance_not_editable(self, make_advance, advance_service, employee):
        advance = make_advance(employee.id, approve=True)
        with pytest.raises(AdvanceNotEditableError):
            advance_service.update(advance.id, amount="1")

    def test_status_not_editable_through_update(self, make_advance, advance_service, employee):
        advance = make_advance(employee.id)
        with pytest.raises(TypeError):
            advance_service.update(advance.id, status=AdvanceStatus.APPROVED)

    def test_update_revalidates(self, make_advance, advance_service, employee):
        advance = make_advance(employee.id)
        with pytest.raises(FormValidationError):
            advance_service.update(advance.id, month=13)
        assert advance_service.get(advance.id).month == 3

    def test_update_rejects_infinite_amount(self, make_advance, advance_service, employee):
        advance = make_advance(employee.id)
        with pytest.raises(FormValidationError):
            advance_service.update(advance.id, amount=Decimal("Infinity"))
        assert advance_service.get(advance.id).amount == Decimal("50000")


class TestQueries:
    def test_approved_for_period(self, make_advance, advance_service, employee):
        approved = make_advance(employee.id, approve=True)
        make_advance(employee.id)
        make_advance(employee.id, month=4, approve=True)
        found = advance_service.approved_for_period(employee.id, 3, 2024)
        assert [a.id for a in found] == [approved.id]

    def test_list_by_status(self, make_advance, advance_service, employee):
        make_advance(employee.id)
        make_advance(employee.id, approve=True)
        assert len(advance_service.list_advances(status=AdvanceStatus.PENDING)) == 1


def test_delete_any_status(make_advance, advance_service, employee):
    advance = make_advance(employee.id, approve=True)
    assert advance_service.delete(advance.id) is True
    assert advance_service.delete(advance.id) is False
