"""Database connection and session management.

This module owns the process-wide engine and session factory. Every unit of
work opens its own short session through get_session(); no transaction spans
a whole fan-out.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from jobportal.logging import get_logger

from .exceptions import DatabaseConnectionError

_engine: Engine | None = None
_session_factory: sessionmaker | None = None

logger = get_logger(__name__, component="database")


def init_database(database_url: str, create_tables: bool = True) -> None:
    """Initialize the engine and session factory, creating tables if missing.

    Call once during startup. For SQLite file URLs the parent directory is
    created; in-memory SQLite shares one connection across threads so the
    background workers see the same data as the caller.

    Args:
        database_url: SQLAlchemy URL (e.g., "sqlite:///./data/job_portal.db")
        create_tables: Create missing tables (disable to simulate an unprovisioned store)

    Raises:
        DatabaseConnectionError: If initialization fails
    """
    global _engine, _session_factory

    if not database_url or not isinstance(database_url, str):
        raise DatabaseConnectionError("Database URL must be a non-empty string")

    try:
        logger.info(
            "Initializing database",
            extra={"event": "database.initializing", "database_url": _redact_url(database_url)},
        )

        is_sqlite = database_url.startswith("sqlite")
        is_memory = is_sqlite and (database_url.endswith(":memory:") or database_url == "sqlite://")

        if is_sqlite and not is_memory and database_url.startswith("sqlite:///"):
            db_file = Path(database_url.replace("sqlite:///", "", 1))
            if not db_file.parent.exists():
                logger.info(f"Creating database directory: {db_file.parent}")
                db_file.parent.mkdir(parents=True, exist_ok=True)

        engine_kwargs = {"echo": False, "pool_pre_ping": True}
        if is_sqlite:
            engine_kwargs["connect_args"] = {"check_same_thread": False, "timeout": 30}
        if is_memory:
            engine_kwargs["poolclass"] = StaticPool

        if _engine is not None:
            _engine.dispose()

        _engine = create_engine(database_url, **engine_kwargs)

        if is_sqlite:
            _configure_sqlite(_engine, wal=not is_memory)

        _validate_connection(_engine)

        _session_factory = sessionmaker(
            bind=_engine,
            autoflush=True,
            expire_on_commit=False,
        )

        if create_tables:
            from .schema import create_schema

            create_schema(_engine)

        logger.info(
            "Database initialized successfully",
            extra={"event": "database.initialized", "database_url": _redact_url(database_url)},
        )

    except DatabaseConnectionError:
        raise
    except Exception as e:
        error_msg = f"Failed to initialize database: {e}"
        logger.error(error_msg, exc_info=True)
        raise DatabaseConnectionError(error_msg) from e


def _configure_sqlite(engine: Engine, wal: bool) -> None:
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        if wal:
            cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()


def _validate_connection(engine: Engine) -> None:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
        logger.debug("Database connection validated successfully")
    except Exception as e:
        raise DatabaseConnectionError(f"Failed to validate database connection: {e}") from e


def _redact_url(url: str) -> str:
    """Hide the password part of a server URL."""
    if url.startswith("sqlite") or "@" not in url:
        return url

    credentials, host = url.rsplit("@", 1)
    scheme, _, userinfo = credentials.partition("://")
    username = userinfo.split(":", 1)[0]
    return f"{scheme}://{username}:***@{host}"


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Provide a session that commits on success and rolls back on error.

    Example:
        >>> with get_session() as session:
        ...     NotificationRepository(session).count_unread(user_id=7)

    Raises:
        DatabaseConnectionError: If init_database() has not been called
    """
    if _session_factory is None:
        raise DatabaseConnectionError(
            "Database not initialized. Call init_database() before using get_session()"
        )

    session = _session_factory()
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.debug(
            f"Database session rolled back: {e}",
            extra={"event": "database.session.rolled_back", "error_type": type(e).__name__},
        )
        raise
    finally:
        session.close()


def get_engine() -> Engine:
    """Return the initialized engine.

    Raises:
        DatabaseConnectionError: If init_database() has not been called
    """
    if _engine is None:
        raise DatabaseConnectionError(
            "Database not initialized. Call init_database() before using get_engine()"
        )
    return _engine


def close_database() -> None:
    """Dispose of the engine. Safe to call more than once."""
    global _engine, _session_factory

    if _engine is not None:
        logger.info("Closing database connections")
        _engine.dispose()
        _engine = None
        _session_factory = None
