"""
Module: payroll_kernel.db.base
Responsibility: Declarative base classes for all SQLAlchemy ORM models.
    Provides the opaque string primary key convention, the type annotation
    map for consistent column types, and the TrackedBase timestamp mixin.
Architecture position: Kernel > DB.  This is the lowest-level import target
    within the kernel.  ALL model files import from here.  This module MUST
    NOT import from models/, services/, selectors/, domain/, or outer layers.

Invariants enforced:
    - Opaque string ids.  Records imported from a backup keep their ids, so
      the key is a String(64) rather than a native UUID; new records default
      to str(uuid4()).
    - Decimal maps to MoneyString.  NEVER use float for monetary amounts.
    - datetime maps to UTCDateTime (timezone-aware in Python).
"""

from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar
from uuid import uuid4

from sqlalchemy import Date, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from payroll_kernel.db.types import MoneyString, UTCDateTime


def new_id() -> str:
    """Generate a fresh opaque record id."""
    return str(uuid4())


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Guarantees:
        - id is an opaque string, uuid4-generated when not supplied.
        - Decimal maps to MoneyString (exact).
        - datetime maps to UTCDateTime, date to Date.
    """

    type_annotation_map: ClassVar[dict] = {
        Decimal: MoneyString(),
        datetime: UTCDateTime(),
        date: Date(),
        int: Integer,
        str: String(255),
    }

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)


class TrackedBase(Base):
    """
    Abstract base with record timestamps.

    Contract:
        created_at / updated_at come from the service's injected Clock and
        travel with the record through export and import, so there are no
        server-side defaults.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(nullable=False)
    updated_at: Mapped[datetime] = mapped_column(nullable=False)
