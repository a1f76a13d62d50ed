"""
Database connection manager for the stats database.

Provides StatsDB (SQLite) and the ``get_db`` factory that picks the
PostgreSQL backend when DATABASE_URL is configured. Both backends accept the
same ``?``-placeholder SQL, so repositories are written once.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterator, Optional, Union

from .core.config import DEFAULT_SQLITE_PATH

if TYPE_CHECKING:
    from .core.config import Settings
    from .pg_connection import PostgresDB


class StatsDB:
    """
    Stats database connection manager (SQLite).

    Runs in autocommit mode; ``transaction()`` groups several statements into
    one atomic unit.
    """

    def __init__(self, db_path: Optional[Path] = None):
        """
        Initialize the database connection manager.

        Args:
            db_path: Path to the SQLite database file. Defaults to statsdb/sportsdeck.sqlite
        """
        self.db_path = Path(db_path) if db_path else DEFAULT_SQLITE_PATH
        self._connection: Optional[sqlite3.Connection] = None
        self._tx_depth = 0

    def _create_connection(self) -> sqlite3.Connection:
        """Create a new database connection."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(
            str(self.db_path),
            check_same_thread=False,
            isolation_level=None,  # Autocommit mode
        )
        conn.execute("PRAGMA journal_mode = WAL")
        conn.execute("PRAGMA synchronous = NORMAL")

        # Return dicts instead of tuples
        conn.row_factory = sqlite3.Row

        return conn

    @property
    def connection(self) -> sqlite3.Connection:
        """Get or create the database connection."""
        if self._connection is None:
            self._connection = self._create_connection()
        return self._connection

    def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    @contextmanager
    def transaction(self) -> Iterator["StatsDB"]:
        """
        Execute queries within a transaction.

        Yields the database itself; statements issued through it inside the
        block commit together or roll back together. Nested blocks join the
        outer transaction.
        """
        if self._tx_depth:
            self._tx_depth += 1
            try:
                yield self
            finally:
                self._tx_depth -= 1
            return

        conn = self.connection
        conn.execute("BEGIN")
        self._tx_depth = 1
        try:
            yield self
            conn.execute("COMMIT")
        except Exception:
            conn.execute("ROLLBACK")
            raise
        finally:
            self._tx_depth = 0

    def execute(self, query: str, params: tuple = ()) -> None:
        """Execute a single query."""
        self.connection.execute(query, params)

    def executescript(self, sql: str) -> None:
        """Execute a SQL script (multiple statements)."""
        self.connection.executescript(sql)

    def fetchone(self, query: str, params: tuple = ()) -> Optional[dict[str, Any]]:
        """Execute a query and fetch one result as a dict."""
        row = self.connection.execute(query, params).fetchone()
        return dict(row) if row else None

    def fetchall(self, query: str, params: tuple = ()) -> list[dict[str, Any]]:
        """Execute a query and fetch all results as dicts."""
        cur = self.connection.execute(query, params)
        return [dict(row) for row in cur.fetchall()]


Database = Union[StatsDB, "PostgresDB"]


def get_db(settings: "Settings") -> Database:
    """
    Return the configured database backend.

    PostgreSQL when ``database_url`` is set, otherwise the SQLite file at
    ``sqlite_path``.
    """
    if settings.database_url:
        from .pg_connection import PostgresDB

        return PostgresDB(
            settings.database_url,
            max_pool_size=settings.database_pool_size,
        )
    return StatsDB(settings.sqlite_path)
