"""Database layer - engine, base classes, and column types."""

from payroll_kernel.db.base import Base, TrackedBase, new_id
from payroll_kernel.db.engine import (
    build_engine,
    create_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    session_scope,
)
from payroll_kernel.db.types import MoneyString, UTCDateTime

__all__ = [
    "build_engine",
    "create_tables",
    "get_engine",
    "get_session",
    "init_engine_from_url",
    "session_scope",
    "Base",
    "TrackedBase",
    "new_id",
    "MoneyString",
    "UTCDateTime",
]
