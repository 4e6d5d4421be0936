import sqlite3

import psycopg2
import pytest

from db.connection import POSTGRESQL, SQLITE, Database, parse_dialect, sqlite_path
from db.init_db import create_tables


def test_parse_dialect():
    assert parse_dialect("sqlite:///tmp/x.db") == SQLITE
    assert parse_dialect("sqlite:///:memory:") == SQLITE
    assert parse_dialect("postgresql://postgres:1@localhost:5432/dz4") == POSTGRESQL
    assert parse_dialect("dbname=dz4 user=postgres password=1 host=localhost") == POSTGRESQL


def test_sqlite_path():
    assert sqlite_path("sqlite:///data/clients.db") == "data/clients.db"
    assert sqlite_path("sqlite:////abs/clients.db") == "/abs/clients.db"
    assert sqlite_path("sqlite:///") == ":memory:"
    with pytest.raises(ValueError):
        sqlite_path("postgresql://localhost/db")


def test_transaction_commits_on_success(db):
    create_tables(db)
    with db.transaction() as cur:
        new_id = db.insert_returning_id(
            cur, "INSERT INTO clients (first_name, last_name) VALUES (%s, %s)", ("Anna", "Smirnova")
        )
    with db.transaction() as cur:
        cur.execute("SELECT first_name FROM clients WHERE id = %s", (new_id,))
        assert cur.fetchone()[0] == "Anna"


def test_transaction_rolls_back_every_statement_on_failure(db):
    create_tables(db)
    with pytest.raises(sqlite3.IntegrityError):
        with db.transaction() as cur:
            cur.execute("INSERT INTO clients (first_name, last_name) VALUES (%s, %s)", ("Anna", "Smirnova"))
            # Second statement violates NOT NULL; the first must not survive.
            cur.execute("INSERT INTO clients (first_name, last_name) VALUES (%s, %s)", ("Oleg", None))
    with db.transaction() as cur:
        cur.execute("SELECT COUNT(*) FROM clients")
        assert cur.fetchone()[0] == 0


def test_transaction_rolls_back_on_non_database_error(db):
    create_tables(db)
    with pytest.raises(KeyError):
        with db.transaction() as cur:
            cur.execute("INSERT INTO clients (first_name, last_name) VALUES (%s, %s)", ("Anna", "Smirnova"))
            raise KeyError("boom")
    with db.transaction() as cur:
        cur.execute("SELECT COUNT(*) FROM clients")
        assert cur.fetchone()[0] == 0


def test_foreign_keys_enforced(db):
    create_tables(db)
    with pytest.raises(sqlite3.IntegrityError):
        with db.transaction() as cur:
            cur.execute("INSERT INTO phones (client_id, phone_number) VALUES (%s, %s)", (42, "+1"))


def test_close_is_idempotent_and_blocks_further_use(db_url):
    database = Database(db_url)
    database.close()
    database.close()
    assert database.closed
    with pytest.raises(RuntimeError):
        with database.transaction():
            pass


def test_context_manager_closes(db_url):
    with Database(db_url) as database:
        assert not database.closed
    assert database.closed


def test_unreachable_sqlite_path_raises(tmp_path):
    with pytest.raises(sqlite3.OperationalError):
        Database(f"sqlite:///{tmp_path / 'missing' / 'dir' / 'x.db'}")


def test_nested_transaction_fails_without_leaking_cursor(db, monkeypatch):
    from db import connection

    closed = []
    original_close = connection._SqliteCursor.close

    def tracking_close(self):
        closed.append(self)
        original_close(self)

    monkeypatch.setattr(connection._SqliteCursor, "close", tracking_close)
    create_tables(db)
    closed.clear()

    with db.transaction() as outer:
        outer.execute("INSERT INTO clients (first_name, last_name) VALUES (%s, %s)", ("Anna", "Smirnova"))
        with pytest.raises(sqlite3.OperationalError):
            with db.transaction():
                pass
        # The inner cursor is closed, the outer one is still open.
        assert len(closed) == 1 and closed[0] is not outer
    assert len(closed) == 2

    with db.transaction() as cur:
        cur.execute("SELECT COUNT(*) FROM clients")
        assert cur.fetchone()[0] == 1


class _RecordingCursor:
    """Stands in for a psycopg2 cursor and records statements."""

    def __init__(self, conn):
        self.conn = conn
        self.closed = False

    def execute(self, sql, params=None):
        self.conn.calls.append(("execute", sql, params))
        if self.conn.fail_on and self.conn.fail_on in sql:
            raise psycopg2.IntegrityError("boom")

    def fetchone(self):
        return (7,)

    def close(self):
        self.closed = True


class _RecordingConnection:
    """Stands in for a psycopg2 connection."""

    def __init__(self, dsn):
        self.dsn = dsn
        self.calls = []
        self.cursors = []
        self.fail_on = None

    def cursor(self):
        cur = _RecordingCursor(self)
        self.cursors.append(cur)
        return cur

    def commit(self):
        self.calls.append(("commit",))

    def rollback(self):
        self.calls.append(("rollback",))

    def close(self):
        self.calls.append(("close",))


@pytest.fixture()
def pg_db(monkeypatch):
    monkeypatch.setattr(psycopg2, "connect", _RecordingConnection)
    database = Database("postgresql://postgres:1@localhost:5432/clients")
    yield database
    database.close()


class TestPostgresBranch:

    def test_connects_with_url(self, pg_db):
        assert pg_db.dialect == POSTGRESQL
        assert pg_db._conn.dsn == "postgresql://postgres:1@localhost:5432/clients"

    def test_insert_uses_returning_and_commits(self, pg_db):
        conn = pg_db._conn
        with pg_db.transaction() as cur:
            new_id = pg_db.insert_returning_id(
                cur, "INSERT INTO clients (first_name, last_name) VALUES (%s, %s)", ("Ivan", "Ivanov")
            )
        assert new_id == 7
        assert conn.calls == [
            ("execute", "INSERT INTO clients (first_name, last_name) VALUES (%s, %s) RETURNING id", ("Ivan", "Ivanov")),
            ("commit",),
        ]
        assert conn.cursors[0].closed

    def test_no_begin_statement_sent(self, pg_db):
        with pg_db.transaction() as cur:
            cur.execute("SELECT 1")
        assert ("execute", "BEGIN", None) not in pg_db._conn.calls

    def test_failure_rolls_back_and_closes_cursor(self, pg_db):
        conn = pg_db._conn
        conn.fail_on = "phones"
        with pytest.raises(psycopg2.IntegrityError):
            with pg_db.transaction() as cur:
                cur.execute("INSERT INTO phones (client_id, phone_number) VALUES (%s, %s)", (9, "+1"))
        assert conn.calls[-1] == ("rollback",)
        assert ("commit",) not in conn.calls
        assert conn.cursors[0].closed

    def test_close_closes_connection(self, pg_db):
        conn = pg_db._conn
        pg_db.close()
        assert conn.calls[-1] == ("close",)
        assert pg_db.closed

    def test_connect_failure_propagates(self, monkeypatch):
        def refuse(dsn):
            raise psycopg2.OperationalError("could not connect to server")

        monkeypatch.setattr(psycopg2, "connect", refuse)
        with pytest.raises(psycopg2.OperationalError):
            Database("postgresql://postgres:1@nowhere:5432/clients")
