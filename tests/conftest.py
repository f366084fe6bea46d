"""Pytest fixtures and configuration.

Provides a psycopg-shaped fake connection for unit tests and a live
PostgreSQL fixture for integration tests.
"""
import sys
from pathlib import Path
from typing import Any, Generator

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


class FakeCursor:
    """Cursor double: looks up each statement in the connection's script."""

    def __init__(self, conn: "FakeConnection") -> None:
        self._conn = conn
        self._rows: list[dict[str, Any]] = []
        self.description = None
        self.rowcount = -1

    def __enter__(self) -> "FakeCursor":
        return self

    def __exit__(self, *exc_info) -> bool:
        return False

    def execute(self, sql: str) -> None:
        self._conn.executed.append(sql)
        outcome = self._conn.responses.get(sql, self._conn.default)
        if isinstance(outcome, BaseException):
            if self._conn.drop_on_error:
                self._conn.closed = True
            raise outcome
        if outcome is None:
            # Statement without a result set
            self.description = None
            self.rowcount = self._conn.affected_rows
            self._rows = []
        else:
            self.description = [(key,) for key in (outcome[0] if outcome else {})] or [("?",)]
            self.rowcount = len(outcome)
            self._rows = list(outcome)

    def fetchall(self) -> list[dict[str, Any]]:
        return self._rows


class FakeConnection:
    """Connection double for a dict_row psycopg connection.

    Attributes:
        responses: SQL text -> rows (list of dicts), None (no result set)
                   or an exception to raise.
        default: Outcome for statements not listed in `responses`.
        drop_on_error: Mark the connection closed when a statement fails.
    """

    def __init__(self) -> None:
        self.responses: dict[str, Any] = {}
        self.default: Any = []
        self.drop_on_error = False
        self.affected_rows = 0
        self.closed = False
        self.executed: list[str] = []
        self.connect_kwargs: dict[str, Any] = {}

    def cursor(self) -> FakeCursor:
        return FakeCursor(self)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_conn() -> FakeConnection:
    return FakeConnection()


@pytest.fixture
def database(fake_conn: FakeConnection):
    """A Database wired to `fake_conn` (not opened yet)."""
    from db_explorer.db import Database, DatabaseConfig

    def connect(conninfo: str, **kwargs: Any) -> FakeConnection:
        fake_conn.connect_kwargs = {"conninfo": conninfo, **kwargs}
        return fake_conn

    return Database(DatabaseConfig(), connect=connect)


@pytest.fixture(scope="session")
def live_database() -> Generator:
    """Database connected to a real PostgreSQL from the DB_* variables.

    Skips the test when no database is reachable.
    """
    from db_explorer.db import Database, DatabaseConfig

    db = Database(DatabaseConfig())
    if not db.open():
        pytest.skip("PostgreSQL not available - set DB_HOST/DB_PORT/DB_NAME/DB_USER/DB_PASSWORD")

    yield db

    db.close()
