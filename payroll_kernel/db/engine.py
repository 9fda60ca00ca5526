"""
Engine and session management for the local SQLite store.

One module-level engine, set up by ``init_engine_from_url()``.  Services
receive sessions; ``session_scope()`` owns commit/rollback.

The pysqlite driver is put in explicit transaction mode so that SAVEPOINTs
(``session.begin_nested()``, one per record in batch operations) roll back
only their own work.  In-memory databases run on a single shared
connection so every session sees the same data.
"""

import atexit
import os
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from payroll_kernel.logging_config import configure_logging, get_logger

logger = get_logger("db.engine")

DEFAULT_DATABASE_URL = "sqlite:///payroll.db"
DATABASE_URL_ENV = "PAYROLL_DATABASE_URL"

_engine: Engine | None = None
_SessionFactory: sessionmaker[Session] | None = None


def database_url_from_env() -> str:
    return os.environ.get(DATABASE_URL_ENV, DEFAULT_DATABASE_URL)


def _is_memory_url(database_url: str) -> bool:
    return database_url in ("sqlite://", "sqlite:///:memory:") or ":memory:" in database_url


def _enable_savepoints(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # pysqlite's implicit BEGIN would break SAVEPOINT nesting
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Standalone engine (the module-level one is left alone)."""
    options: dict = {"echo": echo}
    if database_url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
        if _is_memory_url(database_url):
            options["poolclass"] = StaticPool

    engine = create_engine(database_url, **options)
    if engine.dialect.name == "sqlite":
        _enable_savepoints(engine)
    return engine


def init_engine_from_url(database_url: str | None = None, echo: bool = False) -> Engine:
    """
    (Re)build the module-level engine and its session factory.

    ``database_url`` defaults to PAYROLL_DATABASE_URL, then to
    ``sqlite:///payroll.db`` in the working directory.
    """
    global _engine, _SessionFactory

    if _engine is not None:
        _engine.dispose()
    _engine = build_engine(database_url or database_url_from_env(), echo=echo)
    _SessionFactory = sessionmaker(bind=_engine, expire_on_commit=False)

    configure_logging()
    logger.info("engine_initialized", extra={"url": str(_engine.url), "echo": echo})
    return _engine


def _not_initialized() -> RuntimeError:
    return RuntimeError("No database engine; call init_engine_from_url() first")


def get_engine() -> Engine:
    if _engine is None:
        raise _not_initialized()
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    """Factory for callers that manage their own sessions (the backup scheduler thread)."""
    if _SessionFactory is None:
        raise _not_initialized()
    return _SessionFactory


def get_session() -> Session:
    return get_session_factory()()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """
    Commit on normal exit, roll back and re-raise on error; always close.

        with session_scope() as session:
            EmployeeService(session).create(...)
    """
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def _metadata():
    from payroll_kernel.db.base import Base
    from payroll_kernel.models import import_all_models

    import_all_models()
    return Base.metadata


def create_tables(engine: Engine | None = None) -> None:
    _metadata().create_all(engine or get_engine())


def reset_engine() -> None:
    """Dispose and forget the module-level engine (test teardown)."""
    global _engine, _SessionFactory

    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionFactory = None


@atexit.register
def _dispose_on_exit() -> None:
    if _engine is not None:
        _engine.dispose()
