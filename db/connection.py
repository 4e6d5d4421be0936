"""
db/connection.py
----------------
Owns the single database connection used by the application.

PostgreSQL (psycopg2) is the production backend; SQLite is accepted for
local runs and tests via ``sqlite:///<path>`` URLs. SQL is written once
with ``%s`` placeholders and adapted for SQLite by the cursor wrapper.
"""

import sqlite3
from contextlib import contextmanager
from typing import Iterator, Optional, Sequence

import psycopg2

from utils.logger import get_logger

logger = get_logger(__name__)

POSTGRESQL = "postgresql"
SQLITE = "sqlite"

_SQLITE_PREFIX = "sqlite:///"


def parse_dialect(url: str) -> str:
    """Return the backend name a connection string refers to."""
    if url.startswith(_SQLITE_PREFIX):
        return SQLITE
    return POSTGRESQL


def sqlite_path(url: str) -> str:
    """Extract the file path (or ``:memory:``) from a ``sqlite:///`` URL."""
    if not url.startswith(_SQLITE_PREFIX):
        raise ValueError(f"Not a SQLite URL: {url!r}")
    path = url[len(_SQLITE_PREFIX):]
    return path or ":memory:"


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


class _SqliteCursor:
    """Cursor adapter translating psycopg2-style ``%s`` placeholders to ``?``."""

    def __init__(self, cursor: sqlite3.Cursor):
        self._cursor = cursor

    def execute(self, sql: str, params: Sequence = ()) -> None:
        self._cursor.execute(sql.replace("%s", "?"), tuple(params))

    def fetchone(self):
        return self._cursor.fetchone()

    def fetchall(self) -> list:
        return self._cursor.fetchall()

    @property
    def rowcount(self) -> int:
        return self._cursor.rowcount

    @property
    def lastrowid(self) -> Optional[int]:
        return self._cursor.lastrowid

    def close(self) -> None:
        self._cursor.close()


class Database:
    """
    A single explicitly owned connection.

    Usage:
        with Database(url) as db:
            with db.transaction() as cur:
                cur.execute("SELECT 1")

    Raises:
        psycopg2.OperationalError / sqlite3.OperationalError:
            If the database is unreachable.
    """

    def __init__(self, url: str):
        self.url = url
        self.dialect = parse_dialect(url)
        self._conn = None
        try:
            if self.dialect == SQLITE:
                # Autocommit mode; transaction() issues BEGIN explicitly.
                conn = sqlite3.connect(sqlite_path(url), isolation_level=None)
                conn.execute("PRAGMA foreign_keys = ON;")
                # Built-in LOWER() folds ASCII only.
                conn.create_function("LOWER", 1, _unicode_lower, deterministic=True)
                self._conn = conn
            else:
                self._conn = psycopg2.connect(url)
            logger.info(f"Connected to {self.dialect} database.")
        except (psycopg2.OperationalError, sqlite3.OperationalError) as e:
            logger.error(f"Failed to connect to database: {e}")
            raise

    @property
    def closed(self) -> bool:
        return self._conn is None

    def _require_conn(self):
        if self._conn is None:
            raise RuntimeError("Database connection is closed.")
        return self._conn

    @contextmanager
    def transaction(self) -> Iterator:
        """
        Run the enclosed statements as one unit of work.

        Commits on normal exit. On any exception the transaction is rolled
        back and the exception re-raised. The cursor is always closed.
        """
        conn = self._require_conn()
        if self.dialect == SQLITE:
            cur = _SqliteCursor(conn.cursor())
            try:
                cur.execute("BEGIN")
            except sqlite3.Error:
                cur.close()
                raise
        else:
            cur = conn.cursor()
        try:
            yield cur
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"Transaction rolled back: {e}")
            raise
        finally:
            cur.close()

    def insert_returning_id(self, cur, sql: str, params: Sequence) -> int:
        """
        Execute an INSERT and return the id of the new row.

        Args:
            cur: Cursor from :meth:`transaction`.
            sql: INSERT statement without a RETURNING clause.
            params: Statement parameters.
        """
        if self.dialect == SQLITE:
            cur.execute(sql, params)
            return int(cur.lastrowid)
        cur.execute(f"{sql} RETURNING id", params)
        return int(cur.fetchone()[0])

    def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.info("Database connection closed.")

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
