"""
Module: workforce_kernel.db.engine
Responsibility: SQLAlchemy engine initialization, session factory management,
    and transactional scope utilities.  This is the single point of database
    connection configuration for the engine.
Architecture position: Kernel > DB.  May import from db/base.py.
    MUST NOT import from models/, services/, domain/, or outer layers
    (except create_tables/drop_tables which import the ORM registry).

Invariants enforced:
    - PostgreSQL is the production backend (READ COMMITTED plus explicit
      row locks and compare-and-set updates).  SQLite is supported for
      tests and local runs; writes are serialized by its database lock.
    - Every storage call is bounded: pool-acquire timeout, and either
      PostgreSQL lock/statement timeouts or the SQLite busy timeout.
    - run_transaction() resolves a lost unique-key race by re-running the
      unit of work in a fresh transaction, which then sees the winner's row.

Failure modes:
    - RuntimeError if get_engine/get_session/get_session_factory called before
      init_engine_from_url().
    - OperationTimeoutError when a bound above is exceeded.
    - IntegrityError when a unique-key conflict persists past the retry.
"""

import atexit
from contextlib import contextmanager
from typing import Callable, Generator, TypeVar

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from workforce_kernel.exceptions import OperationTimeoutError
from workforce_kernel.logging_config import configure_logging, get_logger

logger = get_logger("db.engine")

T = TypeVar("T")

_engine: Engine | None = None
_SessionFactory: sessionmaker[Session] | None = None

# Driver messages that mean "a bounded wait ran out".
_TIMEOUT_MARKERS = (
    "lock timeout",
    "statement timeout",
    "canceling statement due to",
    "database is locked",
)


def init_engine_from_url(
    database_url: str,
    echo: bool = False,
    pool_size: int = 10,
    max_overflow: int = 10,
    pool_pre_ping: bool = True,
    pool_timeout: int = 30,
    pool_recycle: int = 1800,
    lock_timeout_ms: int = 5000,
    statement_timeout_ms: int = 30000,
    sqlite_busy_timeout: float = 30.0,
) -> Engine:
    """
    Initialize the SQLAlchemy engine from a database URL.

    Postconditions: Module-level _engine and _SessionFactory are initialized.
        All subsequent get_engine/get_session calls use this engine.

    Args:
        database_url: postgresql+psycopg://... or sqlite:///path.db
        echo: If True, log all SQL statements.
        pool_size: Number of connections to keep in the pool.
        max_overflow: Max connections beyond pool_size.
        pool_pre_ping: If True, test connections before use.
        pool_timeout: Seconds to wait for a pooled connection.
        pool_recycle: Seconds after which a connection is recycled.
        lock_timeout_ms: PostgreSQL lock_timeout per connection.
        statement_timeout_ms: PostgreSQL statement_timeout per connection.
        sqlite_busy_timeout: Seconds SQLite waits on a locked database.
    """
    global _engine, _SessionFactory

    url = make_url(database_url)
    dialect = url.get_backend_name()

    if dialect == "sqlite":
        in_memory = url.database in (None, "", ":memory:")
        kwargs = {
            "connect_args": {
                "check_same_thread": False,
                "timeout": sqlite_busy_timeout,
            },
        }
        if in_memory:
            kwargs["poolclass"] = StaticPool
        else:
            kwargs.update(
                poolclass=QueuePool,
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_timeout=pool_timeout,
            )
    else:
        kwargs = {
            "poolclass": QueuePool,
            "pool_size": pool_size,
            "max_overflow": max_overflow,
            "pool_pre_ping": pool_pre_ping,
            "pool_timeout": pool_timeout,
            "pool_recycle": pool_recycle,
            "isolation_level": "READ COMMITTED",
            "connect_args": {
                "options": (
                    f"-c lock_timeout={lock_timeout_ms} "
                    f"-c statement_timeout={statement_timeout_ms}"
                ),
            },
        }

    _engine = create_engine(database_url, echo=echo, **kwargs)
    _SessionFactory = sessionmaker(bind=_engine, expire_on_commit=False)

    configure_logging()
    logger.info(
        "engine_initialized",
        extra={
            "dialect": dialect,
            "pool_size": pool_size,
            "max_overflow": max_overflow,
            "pool_timeout": pool_timeout,
            "echo": echo,
        },
    )

    return _engine


def get_engine() -> Engine:
    """
    Get the current engine instance.

    Raises:
        RuntimeError: If engine has not been initialized.
    """
    if _engine is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")
    return _engine


def get_session() -> Session:
    """
    Get a new session instance.

    Raises:
        RuntimeError: If engine has not been initialized.
    """
    if _SessionFactory is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")
    return _SessionFactory()


def get_session_factory() -> sessionmaker[Session]:
    """
    Get the session factory for creating sessions.

    Each worker thread in a fan-out needs its own session.

    Raises:
        RuntimeError: If engine has not been initialized.
    """
    if _SessionFactory is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")
    return _SessionFactory


def translate_timeout(exc: Exception, operation: str) -> OperationTimeoutError | None:
    """Map a driver or pool timeout to OperationTimeoutError, else None."""
    if isinstance(exc, PoolTimeoutError):
        return OperationTimeoutError(operation, "connection pool exhausted")
    if isinstance(exc, OperationalError):
        text = str(exc.orig if exc.orig is not None else exc).lower()
        for marker in _TIMEOUT_MARKERS:
            if marker in text:
                return OperationTimeoutError(operation, marker)
    return None


@contextmanager
def session_scope(
    session_factory: sessionmaker[Session] | None = None,
    operation: str = "session_scope",
) -> Generator[Session, None, None]:
    """
    Provide a transactional scope around a series of operations.

    Postconditions: On normal exit, session is committed and closed.
        On exception, session is rolled back and closed.  Timeouts are
        re-raised as OperationTimeoutError; everything else unchanged.

    Usage:
        with session_scope() as session:
            session.add(entity)
    """
    session = session_factory() if session_factory is not None else get_session()
    logger.debug("transaction_started")
    try:
        yield session
        session.commit()
        logger.debug("transaction_committed")
    except Exception as exc:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        timeout = translate_timeout(exc, operation)
        if timeout is not None:
            raise timeout from exc
        raise
    finally:
        session.close()


def run_transaction(
    session_factory: sessionmaker[Session],
    work: Callable[[Session], T],
    *,
    operation: str,
    conflict_retries: int = 1,
) -> T:
    """
    Run ``work(session)`` in its own transaction and commit.

    A unique-key IntegrityError means a concurrent writer inserted the same
    natural key first.  The unit of work is re-run in a fresh transaction
    (up to ``conflict_retries`` times), where it observes the committed row
    and takes its update path instead.
    """
    attempt = 0
    while True:
        try:
            with session_scope(session_factory, operation=operation) as session:
                return work(session)
        except IntegrityError:
            if attempt >= conflict_retries:
                raise
            attempt += 1
            logger.warning(
                "transaction_conflict_retry",
                extra={"operation": operation, "attempt": attempt},
            )


def create_tables() -> None:
    """
    Create all tables for the kernel and every module.

    Preconditions: Engine must be initialized via init_engine_from_url().
    """
    from workforce_kernel.db.base import Base
    from workforce_modules._orm_registry import import_all_orm_models

    import_all_orm_models()
    Base.metadata.create_all(get_engine())


def drop_tables() -> None:
    """
    Drop all tables. Use with caution - primarily for testing.
    """
    from workforce_kernel.db.base import Base
    from workforce_modules._orm_registry import import_all_orm_models

    import_all_orm_models()
    Base.metadata.drop_all(get_engine())


def reset_engine() -> None:
    """
    Reset the engine and session factory.

    Useful for test cleanup.
    """
    global _engine, _SessionFactory

    if _engine is not None:
        _engine.dispose()
        _engine = None

    _SessionFactory = None


def _atexit_dispose():
    """Dispose the engine on process exit to release all pooled connections."""
    if _engine is not None:
        _engine.dispose()


atexit.register(_atexit_dispose)


def is_postgres() -> bool:
    """Check if the current engine is PostgreSQL."""
    if _engine is None:
        return False
    return _engine.dialect.name == "postgresql"
