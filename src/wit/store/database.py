"""Database engine manager for the description store.

This module provides:
- Database: SQLAlchemy engine wrapper for SQLite files or server URLs
- Write units of work with retry logic for SQLite busy timeouts
- Per-connection setup (SQLite pragmas, PostgreSQL search_path)
- Debug query timing

SQLite gets WAL mode so the daemon and the CLI can share one file. Server
databases (PostgreSQL) are reached by URL, optionally scoped to a schema.
"""

from __future__ import annotations

import re
import time
from collections.abc import Callable, Generator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlmodel import Session, SQLModel, create_engine

from wit.core.errors import StoreError

if TYPE_CHECKING:
    from sqlalchemy import Engine

    from wit.config.models import DatabaseConfig

logger = structlog.get_logger()

# Retry configuration for SQLite busy handling
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_BASE_DELAY = 0.1  # 100ms base
DEFAULT_RETRY_MAX_DELAY = 2.0  # 2s max
DEFAULT_BUSY_TIMEOUT_MS = 30000

_UNSAFE_SCHEMA_CHARS = re.compile(r"[^a-zA-Z0-9_]")


def _is_database_locked_error(error: Exception) -> bool:
    """Check if error is a SQLite database locked error."""
    error_str = str(error).lower()
    return "database is locked" in error_str or "database is busy" in error_str


def sanitize_schema_name(schema: str | None) -> str:
    """Strip everything but letters, digits and underscores; default to 'public'."""
    cleaned = _UNSAFE_SCHEMA_CHARS.sub("", schema or "")
    return cleaned or "public"


class Database:
    """Connection manager for SQLite files and server databases.

    Includes retry logic with exponential backoff for handling
    SQLite busy timeouts during concurrent writes.
    """

    def __init__(
        self,
        url: str,
        *,
        schema_name: str | None = None,
        connect_timeout_sec: int = 10,
        busy_timeout_ms: int = DEFAULT_BUSY_TIMEOUT_MS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_base_delay: float = DEFAULT_RETRY_BASE_DELAY,
        retry_max_delay: float = DEFAULT_RETRY_MAX_DELAY,
    ) -> None:
        self.url = url
        self._schema_name = schema_name
        self._connect_timeout_sec = connect_timeout_sec
        self._busy_timeout_ms = busy_timeout_ms
        self._max_retries = max_retries
        self._retry_base_delay = retry_base_delay
        self._retry_max_delay = retry_max_delay
        self.engine = self._create_engine()

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> Database:
        """Build from config, preferring ``url`` over ``path``.

        Raises:
            StoreError: If neither a URL nor a path is configured, or the
                URL cannot be turned into an engine.
        """
        if config.url:
            url = config.url
        elif config.path:
            db_path = Path(config.path).expanduser()
            db_path.parent.mkdir(parents=True, exist_ok=True)
            url = f"sqlite:///{db_path}"
        else:
            raise StoreError.not_configured()
        try:
            return cls(
                url,
                schema_name=config.schema_name,
                connect_timeout_sec=config.connect_timeout_sec,
                busy_timeout_ms=config.busy_timeout_ms,
                max_retries=config.max_retries,
                retry_base_delay=config.retry_base_delay_sec,
            )
        except (SQLAlchemyError, ImportError) as e:
            # Unknown dialect or missing driver package
            raise StoreError.unavailable(str(e)) from e

    @property
    def backend(self) -> str:
        """Dialect name, e.g. 'sqlite' or 'postgresql'."""
        return self.engine.dialect.name

    def _create_engine(self) -> Engine:
        backend = make_url(self.url).get_backend_name()
        if backend == "sqlite":
            engine = create_engine(
                self.url,
                connect_args={"check_same_thread": False},
                pool_pre_ping=True,
            )
            busy_timeout_ms = self._busy_timeout_ms

            def _on_connect(dbapi_conn: Any, _connection_record: Any) -> None:
                _configure_pragmas(dbapi_conn, busy_timeout_ms)

            event.listen(engine, "connect", _on_connect)
        else:
            connect_args: dict[str, Any] = {}
            if backend == "postgresql":
                connect_args["connect_timeout"] = self._connect_timeout_sec
            engine = create_engine(self.url, connect_args=connect_args, pool_pre_ping=True)
            if backend == "postgresql":
                schema = sanitize_schema_name(self._schema_name)

                def _on_pg_connect(dbapi_conn: Any, _connection_record: Any) -> None:
                    cursor = dbapi_conn.cursor()
                    cursor.execute(f'SET search_path TO "{schema}"')
                    cursor.close()

                event.listen(engine, "connect", _on_pg_connect)

        event.listen(engine, "before_cursor_execute", _start_query_timer)
        event.listen(engine, "after_cursor_execute", _log_query_timing)
        return engine

    def create_all(self) -> None:
        """Create all tables from SQLModel metadata."""
        SQLModel.metadata.create_all(self.engine)

    def drop_all(self) -> None:
        """Drop all tables. Use with caution."""
        SQLModel.metadata.drop_all(self.engine)

    def ping(self) -> None:
        """Round-trip a trivial query.

        Raises:
            StoreError: If the database cannot be reached.
        """
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            raise StoreError.unavailable(str(getattr(e, "orig", None) or e)) from e

    def prepare(self) -> None:
        """Check connectivity and create missing tables.

        Raises:
            StoreError: If the database cannot be reached or initialized.
        """
        self.ping()
        try:
            self.create_all()
        except SQLAlchemyError as e:
            raise StoreError.unavailable(str(e)) from e

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """ORM session for reads."""
        with Session(self.engine) as session:
            yield session

    def run_write[T](
        self,
        work: Callable[[Session], T],
        max_retries: int | None = None,
    ) -> T:
        """
        Run ``work`` in a write transaction, committed on return.

        The whole unit of work is retried with exponential backoff when
        SQLite reports the database as locked; any other error rolls back
        and propagates.

        Args:
            work: Receives the session; must be safe to run again on retry
            max_retries: Override default max retries (default: 3)
        """
        retries = max_retries if max_retries is not None else self._max_retries

        for attempt in range(retries + 1):  # +1 for initial attempt
            try:
                with Session(self.engine) as session:
                    try:
                        result = work(session)
                        session.commit()
                    except Exception:
                        session.rollback()
                        raise
                return result
            except OperationalError as e:
                if not (_is_database_locked_error(e) and attempt < retries):
                    raise
                delay = min(
                    self._retry_base_delay * (2**attempt),
                    self._retry_max_delay,
                )
                logger.warning(
                    "sqlite_busy_retry",
                    attempt=attempt + 1,
                    max_retries=retries,
                    delay_sec=delay,
                )
                time.sleep(delay)

        raise AssertionError("unreachable")

    def dispose(self) -> None:
        """Close all pooled connections."""
        self.engine.dispose()


def _configure_pragmas(dbapi_conn: Any, busy_timeout_ms: int) -> None:
    """Configure SQLite for concurrent access."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute(f"PRAGMA busy_timeout={int(busy_timeout_ms)}")
    cursor.execute("PRAGMA synchronous=NORMAL")  # Safe with WAL
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _start_query_timer(
    conn: Any,
    _cursor: Any,
    _statement: str,
    _parameters: Any,
    _context: Any,
    _executemany: bool,
) -> None:
    conn.info.setdefault("query_start", []).append(time.perf_counter())


def _log_query_timing(
    conn: Any,
    cursor: Any,
    statement: str,
    _parameters: Any,
    _context: Any,
    _executemany: bool,
) -> None:
    starts = conn.info.get("query_start")
    if not starts:
        return
    duration_ms = (time.perf_counter() - starts.pop()) * 1000
    logger.debug(
        "query_executed",
        statement=" ".join(statement.split())[:120],
        duration_ms=round(duration_ms, 2),
        rows=cursor.rowcount,
    )
