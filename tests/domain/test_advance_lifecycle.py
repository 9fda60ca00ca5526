"""Tests for the advance approval state machine."""

import pytest

from payroll_kernel.domain.advance_lifecycle import (
    ADVANCE_WORKFLOW,
    EDITABLE_STATUSES,
    RECEIPTABLE_STATUSES,
    next_status,
)
from payroll_kernel.domain.dtos import AdvanceStatus
from payroll_kernel.domain.workflow import Transition, Workflow


class TestAdvanceWorkflow:
    @pytest.mark.parametrize(
        "current,action,expected",
        [
            (AdvanceStatus.PENDING, "approve", AdvanceStatus.APPROVED),
            (AdvanceStatus.PENDING, "reject", AdvanceStatus.REJECTED),
            (AdvanceStatus.APPROVED, "mark_repaid", AdvanceStatus.REPAID),
        ],
    )
    def test_allowed_transitions(self, current, action, expected):
        assert next_status(current, action) == expected

    @pytest.mark.parametrize(
        "current,action",
        [
            (AdvanceStatus.APPROVED, "approve"),
            (AdvanceStatus.APPROVED, "reject"),
            (AdvanceStatus.REJECTED, "approve"),
            (AdvanceStatus.REPAID, "approve"),
            (AdvanceStatus.PENDING, "mark_repaid"),
            (AdvanceStatus.PENDING, "cancel"),
        ],
    )
    def test_disallowed_transitions(self, current, action):
        assert next_status(current, action) is None

    def test_terminal_states_have_no_actions(self):
        for state in ADVANCE_WORKFLOW.terminal_states:
            assert ADVANCE_WORKFLOW.actions_from(state) == ()

    def test_only_pending_is_editable(self):
        assert EDITABLE_STATUSES == frozenset({AdvanceStatus.PENDING})

    def test_receipts_for_approved_and_repaid(self):
        assert RECEIPTABLE_STATUSES == frozenset({AdvanceStatus.APPROVED, AdvanceStatus.REPAID})


class TestWorkflowDefinition:
    def test_unknown_state_in_transition_rejected(self):
        with pytest.raises(ValueError):
            Workflow(
                name="broken",
                description="",
                initial_state="a",
                states=("a",),
                transitions=(Transition("a", "b", "go"),),
            )
