"""Database connection owner for the Query Gateway (Postgres)."""
import math
import os
import threading
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Callable, Optional
from uuid import UUID

import psycopg
from psycopg.rows import dict_row

from .errors import ConfigurationError, ConnectivityError, DatabaseError, QueryExecutionError
from .logging import logger, sql_preview


# Fixed introspection query behind the table listing
LIST_TABLES_SQL = (
    "SELECT table_name FROM information_schema.tables "
    "WHERE table_schema = current_schema() ORDER BY table_name"
)

NOT_CONNECTED = "Database connection is not available"


class DatabaseConfig:
    """Database configuration from environment variables."""

    def __init__(self) -> None:
        self.host = os.getenv("DB_HOST", "localhost")
        self.name = os.getenv("DB_NAME", "explorer")
        self.user = os.getenv("DB_USER", "explorer")
        self.password = os.getenv("DB_PASSWORD", "explorer")
        raw_port = os.getenv("DB_PORT", "5432")
        try:
            self.port = int(raw_port)
        except ValueError:
            raise ConfigurationError(
                f"DB_PORT must be an integer, got {raw_port!r}",
                details={"variable": "DB_PORT"}
            )

    def connection_string(self) -> str:
        """Return PostgreSQL connection string."""
        return (
            f"host={self.host} "
            f"port={self.port} "
            f"dbname={self.name} "
            f"user={self.user} "
            f"password={self.password}"
        )

    def describe(self) -> str:
        """Connection target without credentials, for logs and the UI."""
        return f"{self.host}:{self.port}/{self.name}"


def serialize_value(value: Any) -> Any:
    """Convert a driver value into something JSON can carry.

    No raw driver objects (Decimal, datetime, memoryview...) leak into
    API responses. NUMERIC values keep their exact text (`"120.50"`), and
    NaN and infinities are spelled out so JSON never turns them into null.
    """
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        if math.isfinite(value):
            return value
        if math.isnan(value):
            return "NaN"
        return "Infinity" if value > 0 else "-Infinity"
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, timedelta):
        return value.total_seconds()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    if isinstance(value, dict):
        return {str(k): serialize_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize_value(v) for v in value]
    return str(value)


def serialize_row(row: dict[str, Any]) -> dict[str, Any]:
    return {column: serialize_value(value) for column, value in row.items()}


class Database:
    """Owns the Gateway's single persistent connection.

    Opened once at application startup and closed at shutdown. Statements
    run in autocommit mode, one at a time: there is no pool, no transaction
    and no reconnect. If the connection drops, every later call raises
    ConnectivityError until the process restarts.

    Usage:
        with Database(DatabaseConfig()) as db:
            rows = db.run_query("SELECT 1 AS x")
    """

    def __init__(
        self,
        config: Optional[DatabaseConfig] = None,
        connect: Callable[..., Any] = psycopg.connect,
    ) -> None:
        self._config = config or DatabaseConfig()
        self._connect = connect
        self._conn: Any = None
        self._lock = threading.Lock()

    @property
    def config(self) -> DatabaseConfig:
        return self._config

    @property
    def is_connected(self) -> bool:
        return self._conn is not None and not self._conn.closed

    def open(self) -> bool:
        """Establish the connection.

        A failure is logged, not raised: the Gateway keeps serving and
        answers every request with a connectivity error.

        Returns:
            True if the connection was established.
        """
        try:
            self._conn = self._connect(
                self._config.connection_string(),
                autocommit=True,
                row_factory=dict_row,
            )
        except psycopg.Error as e:
            logger.error("Error connecting to database %s: %s", self._config.describe(), e)
            self._conn = None
            return False
        logger.info("Connected to database %s", self._config.describe())
        return True

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.info("Database connection closed")

    def __enter__(self) -> "Database":
        self.open()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def ping(self) -> bool:
        """Return True if the connection answers `SELECT 1`.

        While another statement holds the connection, the open/closed state
        is reported instead of waiting for it.
        """
        if not self._lock.acquire(blocking=False):
            return self.is_connected
        try:
            self._execute_locked("SELECT 1")
        except DatabaseError:
            return False
        finally:
            self._lock.release()
        return True

    def list_tables(self) -> list[str]:
        """Names of the tables in the connected schema.

        Raises:
            DatabaseError: If the introspection query fails.
        """
        rows = self._execute(LIST_TABLES_SQL)
        return [str(next(iter(row.values()))) for row in rows if row]

    def run_query(self, sql: str) -> list[dict[str, Any]]:
        """Execute `sql` exactly as given and return its rows.

        Statements without a result set (DDL, DML) return an empty list.

        Raises:
            QueryExecutionError: The database rejected the statement.
            ConnectivityError: No usable connection.
        """
        return [serialize_row(row) for row in self._execute(sql)]

    def _execute(self, sql: str) -> list[dict[str, Any]]:
        with self._lock:
            return self._execute_locked(sql)

    def _execute_locked(self, sql: str) -> list[dict[str, Any]]:
        if not self.is_connected:
            raise ConnectivityError(NOT_CONNECTED)
        try:
            with self._conn.cursor() as cur:
                cur.execute(sql)
                if cur.description is None:
                    logger.info("Statement affected %s row(s): %s", cur.rowcount, sql_preview(sql))
                    return []
                return list(cur.fetchall())
        except psycopg.Error as e:
            if self._conn.closed:
                logger.error("Database connection lost: %s", e)
                raise ConnectivityError(
                    f"{NOT_CONNECTED}: {e}",
                    details={"sqlstate": getattr(e, "sqlstate", None)}
                ) from e
            raise QueryExecutionError(
                str(e),
                details={"sqlstate": getattr(e, "sqlstate", None)}
            ) from e
