"""
Module: payroll_kernel.selectors.base
Responsibility: Base class for read-only query selectors.

Invariants enforced:
    - Read-only: selectors never add, delete, flush or commit.
    - Selectors return frozen dataclasses, not ORM instances.
"""

from abc import ABC

from sqlalchemy.orm import Session


class BaseSelector(ABC):
    """Read-only queries over the caller's session."""

    def __init__(self, session: Session):
        self.session = session
