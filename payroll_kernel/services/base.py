"""
BaseService -- abstract base for all payroll services.

Responsibility:
    Provides the common constructor and session-handling contract for
    every service.  Services receive a SQLAlchemy ``Session`` and an
    optional Clock, and use ``session.flush()`` -- never
    ``session.commit()``.

Invariants enforced:
    Transaction boundaries: services flush within the caller's transaction
    and never commit or rollback themselves.  The caller (``session_scope``,
    the CLI, the backup scheduler, or a test) owns commit/rollback, so a
    failing single-record operation leaves nothing behind.
"""

from abc import ABC

from sqlalchemy.orm import Session

from payroll_kernel.domain.clock import Clock, SystemClock


class BaseService(ABC):
    """
    Abstract base class for payroll services.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
        - Aggregate read-only queries belong in ``payroll_kernel/selectors/``.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        self.session = session
        self.clock = clock or SystemClock()
