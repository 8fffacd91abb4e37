import logging
from contextlib import contextmanager
from typing import Any, Callable, TypeVar

from sqlalchemy import create_engine, event, text
from sqlalchemy.exc import OperationalError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from tenacity import retry, stop_after_attempt, wait_fixed, retry_if_exception_type

from app.core.config import get_settings
from app.core.errors import DependencyError

logger = logging.getLogger(__name__)

settings = get_settings()

T = TypeVar("T")

TRANSIENT_ERRORS = (OperationalError, PoolTimeoutError)


def _build_engine(url: str):
    if url.startswith("sqlite"):
        # Test/dev store: one shared in-memory connection
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=settings.debug,
        )

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    # pool_size: connections kept ready; max_overflow: extra under load
    # statement_timeout bounds every single storage call
    return create_engine(
        url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        pool_pre_ping=True,
        connect_args={"options": f"-c statement_timeout={settings.db_statement_timeout_ms}"},
        echo=settings.debug,  # Log SQL queries in debug mode
    )


engine = _build_engine(settings.sqlalchemy_url)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def get_db_session():
    """
    Context manager for database sessions. Commits on success, rolls back on
    any exception.
    Usage:
        with get_db_session() as db:
            db.execute(text("SELECT * FROM students"))
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@retry(
    stop=stop_after_attempt(2),
    wait=wait_fixed(0.2),
    retry=retry_if_exception_type(TRANSIENT_ERRORS),
    reraise=True,
)
def _run_once(fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    with get_db_session() as db:
        return fn(db, *args, **kwargs)


def run_in_transaction(fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """
    Run `fn(db, *args, **kwargs)` as one unit of work.

    Everything `fn` writes is committed together or not at all. A transient
    storage failure (lost connection, pool exhaustion, statement timeout) is
    retried once; a second failure surfaces as DependencyError.
    """
    try:
        return _run_once(fn, *args, **kwargs)
    except TRANSIENT_ERRORS as e:
        logger.error("Storage unavailable while running %s: %s", getattr(fn, "__name__", fn), e)
        raise DependencyError("Database temporarily unavailable, please retry") from e


def rows_to_dicts(result) -> list:
    return [dict(row) for row in result.mappings().all()]


def supports_row_locks(db: Session) -> bool:
    return db.get_bind().dialect.name != "sqlite"


def for_update(db: Session) -> str:
    """Row-lock suffix for SELECTs that precede a conditional write."""
    return " FOR UPDATE" if supports_row_locks(db) else ""


def month_bucket(db: Session, column: str) -> str:
    """SQL expression grouping a timestamp/date column by year-month."""
    if db.get_bind().dialect.name == "sqlite":
        return f"strftime('%Y-%m', {column})"
    return f"to_char({column}, 'YYYY-MM')"


def ping_database() -> bool:
    """
    Test if the database is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        with get_db_session() as db:
            result = db.execute(text("SELECT 1 as test"))
            row = result.fetchone()
            return row[0] == 1
    except Exception as e:
        logger.error("Database connection failed: %s", e)
        return False
