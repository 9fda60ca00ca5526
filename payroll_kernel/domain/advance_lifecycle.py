"""Advance lifecycle.

pending -> approved | rejected, then approved -> repaid on an explicit
``mark_repaid``.  Nothing moves an advance to repaid automatically.
"""

from payroll_kernel.domain.dtos import AdvanceStatus
from payroll_kernel.domain.workflow import Guard, Transition, Workflow


ADVANCE_IS_PENDING = Guard(
    name="advance_is_pending",
    description="Only a pending advance can be decided or edited",
)

ADVANCE_IS_APPROVED = Guard(
    name="advance_is_approved",
    description="Only an approved advance can be marked repaid",
)

_PENDING = AdvanceStatus.PENDING.value
_APPROVED = AdvanceStatus.APPROVED.value
_REJECTED = AdvanceStatus.REJECTED.value
_REPAID = AdvanceStatus.REPAID.value

ADVANCE_WORKFLOW = Workflow(
    name="advance",
    description="Salary advance request lifecycle",
    initial_state=_PENDING,
    states=(_PENDING, _APPROVED, _REJECTED, _REPAID),
    transitions=(
        Transition(_PENDING, _APPROVED, action="approve", guard=ADVANCE_IS_PENDING),
        Transition(_PENDING, _REJECTED, action="reject", guard=ADVANCE_IS_PENDING),
        Transition(_APPROVED, _REPAID, action="mark_repaid", guard=ADVANCE_IS_APPROVED),
    ),
    terminal_states=(_REJECTED, _REPAID),
)

EDITABLE_STATUSES: frozenset[AdvanceStatus] = frozenset({AdvanceStatus.PENDING})

# Statuses for which an advance receipt can be printed
RECEIPTABLE_STATUSES: frozenset[AdvanceStatus] = frozenset(
    {AdvanceStatus.APPROVED, AdvanceStatus.REPAID}
)


def next_status(current: AdvanceStatus, action: str) -> AdvanceStatus | None:
    """Target status for ``action`` from ``current``, or None if not allowed."""
    transition = ADVANCE_WORKFLOW.find_transition(current.value, action)
    if transition is None:
        return None
    return AdvanceStatus(transition.to_state)
