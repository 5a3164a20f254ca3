"""
Module: ledger_kernel.db.engine
Responsibility: One process-wide engine and session factory, plus the
    commit-or-rollback scope used by callers that run outside a request
    framework.
Architecture position: Kernel > DB.  create_tables()/drop_tables() import
    ledger_kernel.models so the metadata is complete; nothing else above
    db/ is imported.

PostgreSQL runs at READ COMMITTED; header edits and voucher allocation
take explicit row locks.  SQLite is accepted for local runs and the
default test suite: the driver's implicit BEGIN is replaced with an
explicit one so SAVEPOINT works, and ``:memory:`` URLs share a single
connection.
"""

import atexit
from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ledger_kernel.logging_config import configure_logging, get_logger

logger = get_logger("db.engine")

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None

_NOT_INITIALIZED = "Engine not initialized. Call init_engine_from_url() first."


def _is_sqlite(url: URL) -> bool:
    return url.get_backend_name() == "sqlite"


def _install_sqlite_hooks(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        dbapi_connection.execute("PRAGMA foreign_keys=ON")

    @event.listens_for(engine, "begin")
    def _begin(conn):
        conn.exec_driver_sql("BEGIN")


def init_engine_from_url(
    database_url: str,
    echo: bool = False,
    pool_size: int = 20,
    max_overflow: int = 10,
    pool_pre_ping: bool = True,
    pool_timeout: int = 30,
    pool_recycle: int = 1800,
) -> Engine:
    """
    Create the engine and session factory for ``database_url``.

    Pool arguments apply to server databases only.  Calling this again
    replaces the previous engine without disposing it; use reset_engine()
    first when that matters.
    """
    global _engine, _session_factory

    url = make_url(database_url)
    options: dict[str, Any] = {"echo": echo}
    if _is_sqlite(url):
        options["connect_args"] = {"check_same_thread": False}
        if url.database in (None, "", ":memory:"):
            options["poolclass"] = StaticPool
    else:
        options.update(
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=pool_pre_ping,
            pool_timeout=pool_timeout,
            pool_recycle=pool_recycle,
            isolation_level="READ COMMITTED",
        )

    engine = create_engine(url, **options)
    if _is_sqlite(url):
        _install_sqlite_hooks(engine)

    _engine = engine
    _session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    configure_logging()
    logger.info(
        "engine_initialized",
        extra={"dialect": url.get_backend_name(), "echo": echo},
    )
    return engine


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    """The sessionmaker; threads that need their own session call it."""
    if _session_factory is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _session_factory


def get_session() -> Session:
    return get_session_factory()()


@contextmanager
def session_scope() -> Iterator[Session]:
    """
    Yield a session that is committed on normal exit.

    Any exception rolls the session back and propagates.  The session is
    closed either way.

        with session_scope() as session:
            LedgerPostingService(session, settings, actor_id).post(kind, inputs)
    """
    session = get_session()
    try:
        yield session
        session.commit()
        logger.debug("transaction_committed")
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def _metadata():
    from ledger_kernel.db.base import Base
    import ledger_kernel.models  # noqa: F401

    return Base.metadata


def create_tables() -> None:
    metadata = _metadata()
    metadata.create_all(get_engine())
    logger.info("tables_created", extra={"table_count": len(metadata.tables)})


def drop_tables() -> None:
    """Drop every ledger table.  Test teardown only."""
    _metadata().drop_all(get_engine())


def reset_engine() -> None:
    """Dispose the engine and forget the session factory."""
    global _engine, _session_factory
    engine, _engine, _session_factory = _engine, None, None
    if engine is not None:
        engine.dispose()


@atexit.register
def _dispose_at_exit() -> None:
    if _engine is None:
        return
    try:
        _engine.dispose()
    except SQLAlchemyError:
        logger.debug("engine_dispose_failed", exc_info=True)
