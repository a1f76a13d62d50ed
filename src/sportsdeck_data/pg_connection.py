"""
PostgreSQL connection manager.

Provides the same interface as StatsDB using psycopg3 with a connection pool.
Queries are written with SQLite-style ``?`` placeholders and translated here.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import psycopg
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool


def to_pg_placeholders(query: str) -> str:
    """Translate ``?`` placeholders to psycopg's ``%s``."""
    return query.replace("?", "%s")


class PostgresDB:
    """
    PostgreSQL database connection manager.

    Provides the same interface as StatsDB for drop-in compatibility,
    with connection pooling for production performance.
    """

    def __init__(
        self,
        connection_string: Optional[str] = None,
        min_pool_size: int = 1,
        max_pool_size: Optional[int] = None,
    ):
        """
        Initialize the PostgreSQL connection manager.

        Args:
            connection_string: PostgreSQL connection URL. Defaults to DATABASE_URL env var.
            min_pool_size: Minimum connections to keep in pool.
            max_pool_size: Maximum connections in pool. Defaults to DATABASE_POOL_SIZE env var or 10.
        """
        self.connection_string = connection_string or os.environ.get("DATABASE_URL")
        if not self.connection_string:
            raise ValueError(
                "DATABASE_URL environment variable required or connection_string must be provided"
            )

        self._max_pool_size = max_pool_size or int(os.environ.get("DATABASE_POOL_SIZE", 10))
        self._min_pool_size = min(min_pool_size, self._max_pool_size)
        self._tx_conn: Optional[psycopg.Connection] = None

        self._pool = ConnectionPool(
            self.connection_string,
            min_size=self._min_pool_size,
            max_size=self._max_pool_size,
            kwargs={"row_factory": dict_row},
            open=True,
        )

    @contextmanager
    def get_connection(self) -> Iterator[psycopg.Connection]:
        """Get a connection from the pool."""
        with self._pool.connection() as conn:
            yield conn

    @contextmanager
    def transaction(self) -> Iterator["PostgresDB"]:
        """
        Execute queries within a transaction.

        Statements issued through the yielded database run on one pooled
        connection and commit together. Nested blocks join the outer one.
        """
        if self._tx_conn is not None:
            yield self
            return

        with self.get_connection() as conn:
            self._tx_conn = conn
            try:
                yield self
                conn.commit()
            except Exception:
                conn.rollback()
                raise
            finally:
                self._tx_conn = None

    def _run(self, query: str, params: tuple, fetch: Optional[str] = None) -> Any:
        sql = to_pg_placeholders(query)
        if self._tx_conn is not None:
            with self._tx_conn.cursor() as cur:
                cur.execute(sql, params)
                return self._collect(cur, fetch)

        with self.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                result = self._collect(cur, fetch)
            conn.commit()
            return result

    @staticmethod
    def _collect(cur: psycopg.Cursor, fetch: Optional[str]) -> Any:
        if fetch == "one":
            row = cur.fetchone()
            return dict(row) if row else None
        if fetch == "all":
            return [dict(row) for row in cur.fetchall()]
        return None

    def execute(self, query: str, params: tuple = ()) -> None:
        """Execute a single query without returning results."""
        self._run(query, params)

    def executescript(self, sql: str) -> None:
        """Execute a SQL script (multiple statements)."""
        with self.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(sql)
            conn.commit()

    def fetchone(self, query: str, params: tuple = ()) -> Optional[dict[str, Any]]:
        """Execute a query and fetch one result as a dict."""
        return self._run(query, params, fetch="one")

    def fetchall(self, query: str, params: tuple = ()) -> list[dict[str, Any]]:
        """Execute a query and fetch all results as dicts."""
        return self._run(query, params, fetch="all")

    def close(self) -> None:
        """Close the connection pool."""
        self._pool.close()
