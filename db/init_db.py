"""
db/init_db.py
-------------
Creates the database schema (tables) if they do not already exist.
Run this module directly to initialize the configured database:
    python -m db.init_db
"""

from db.connection import SQLITE, Database
from utils.logger import get_logger

logger = get_logger(__name__)

POSTGRES_SCHEMA = [
    """
    -- Clients: one row per person
    CREATE TABLE IF NOT EXISTS clients (
        id              SERIAL PRIMARY KEY,
        first_name      TEXT NOT NULL,
        last_name       TEXT NOT NULL,
        email           TEXT
    );
    """,
    """
    -- Phones: any number per client, removed together with the client
    CREATE TABLE IF NOT EXISTS phones (
        id              SERIAL PRIMARY KEY,
        client_id       INTEGER NOT NULL REFERENCES clients(id) ON DELETE CASCADE,
        phone_number    TEXT
    );
    """,
]

SQLITE_SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS clients (
        id              INTEGER PRIMARY KEY AUTOINCREMENT,
        first_name      TEXT NOT NULL,
        last_name       TEXT NOT NULL,
        email           TEXT
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS phones (
        id              INTEGER PRIMARY KEY AUTOINCREMENT,
        client_id       INTEGER NOT NULL REFERENCES clients(id) ON DELETE CASCADE,
        phone_number    TEXT
    );
    """,
]


def schema_for(dialect: str) -> list[str]:
    """Return the DDL statements for the given backend."""
    return SQLITE_SCHEMA if dialect == SQLITE else POSTGRES_SCHEMA


def create_tables(db: Database) -> None:
    """
    Create the clients and phones tables in one transaction.
    Safe to call multiple times (uses IF NOT EXISTS).
    """
    try:
        with db.transaction() as cur:
            for statement in schema_for(db.dialect):
                cur.execute(statement)
        logger.info("Database schema initialized successfully.")
    except Exception as e:
        logger.error(f"Failed to initialize schema: {e}")
        raise


if __name__ == "__main__":
    from config import DATABASE_URL

    with Database(DATABASE_URL) as database:
        create_tables(database)
    print("Database schema created successfully.")
