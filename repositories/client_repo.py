"""
repositories/client_repo.py
----------------------------
Data access layer for clients and their phone numbers.
All SQL queries related to the `clients` and `phones` tables live here.
"""

from typing import Optional

from db.connection import Database
from db.init_db import create_tables
from models.client import Client, ClientSearchRow, Phone
from utils.logger import get_logger

logger = get_logger(__name__)


def _like_pattern(keyword: str) -> str:
    """Build a LIKE pattern matching `keyword` literally as a substring."""
    escaped = (
        keyword.replace("\\", "\\\\")
        .replace("%", "\\%")
        .replace("_", "\\_")
    )
    return f"%{escaped.lower()}%"


class ClientRepository:
    """
    Repository for CRUD operations on the clients and phones tables.

    Each method runs in its own transaction on the given Database.
    Update and delete methods report whether a row matched; a missing
    id is not an error at this layer.
    """

    def __init__(self, db: Database):
        self.db = db

    # ── SCHEMA ────────────────────────────────────────────

    def ensure_schema(self) -> None:
        """Create the clients and phones tables if they are absent."""
        create_tables(self.db)

    # ── CREATE ────────────────────────────────────────────

    def add_client(self, first_name: str, last_name: str, email: Optional[str] = None) -> int:
        """
        Insert a new client.

        Args:
            first_name: Required given name.
            last_name: Required family name.
            email: Optional email address.

        Returns:
            The id assigned by the database.
        """
        sql = "INSERT INTO clients (first_name, last_name, email) VALUES (%s, %s, %s)"
        with self.db.transaction() as cur:
            client_id = self.db.insert_returning_id(cur, sql, (first_name, last_name, email))
        logger.info(f"Added client #{client_id}")
        return client_id

    def add_phone(self, client_id: int, phone_number: Optional[str]) -> int:
        """
        Insert a phone number for an existing client.

        Returns:
            The id of the new phone row.

        Raises:
            IntegrityError: If `client_id` does not reference a client.
        """
        sql = "INSERT INTO phones (client_id, phone_number) VALUES (%s, %s)"
        with self.db.transaction() as cur:
            phone_id = self.db.insert_returning_id(cur, sql, (client_id, phone_number))
        logger.info(f"Added phone #{phone_id} for client #{client_id}")
        return phone_id

    # ── READ ──────────────────────────────────────────────

    def get_client(self, client_id: int) -> Optional[Client]:
        """Fetch a single client by id, or None."""
        sql = "SELECT id, first_name, last_name, email FROM clients WHERE id = %s"
        with self.db.transaction() as cur:
            cur.execute(sql, (client_id,))
            row = cur.fetchone()
        if row is None:
            return None
        return Client(id=row[0], first_name=row[1], last_name=row[2], email=row[3])

    def get_phones(self, client_id: int) -> list[Phone]:
        """All phones of a client, oldest first."""
        sql = "SELECT id, client_id, phone_number FROM phones WHERE client_id = %s ORDER BY id"
        with self.db.transaction() as cur:
            cur.execute(sql, (client_id,))
            rows = cur.fetchall()
        return [Phone(id=r[0], client_id=r[1], phone_number=r[2]) for r in rows]

    def find_clients(self, keyword: str) -> list[ClientSearchRow]:
        """
        Case-insensitive substring search over name, email and phone number.

        Clients are left-joined with their phones: a client without phones
        yields one row with no phone number, a client with several matching
        phones yields one row per phone.

        Args:
            keyword: Text to look for; wildcard characters match literally.

        Returns:
            List of ClientSearchRow ordered by client id, then phone id.
        """
        sql = """
            SELECT c.id, c.first_name, c.last_name, c.email, p.phone_number
            FROM clients c
            LEFT JOIN phones p ON c.id = p.client_id
            WHERE LOWER(c.first_name) LIKE %s ESCAPE '\\'
               OR LOWER(c.last_name) LIKE %s ESCAPE '\\'
               OR LOWER(c.email) LIKE %s ESCAPE '\\'
               OR LOWER(p.phone_number) LIKE %s ESCAPE '\\'
            ORDER BY c.id, p.id
        """
        pattern = _like_pattern(keyword)
        with self.db.transaction() as cur:
            cur.execute(sql, (pattern, pattern, pattern, pattern))
            rows = cur.fetchall()
        return [
            ClientSearchRow(
                client_id=r[0],
                first_name=r[1],
                last_name=r[2],
                email=r[3],
                phone_number=r[4],
            )
            for r in rows
        ]

    # ── UPDATE ────────────────────────────────────────────

    def update_client(
        self, client_id: int, first_name: str, last_name: str, email: Optional[str]
    ) -> bool:
        """
        Overwrite all mutable fields of a client.

        Returns:
            True if a row was updated, False if no client has that id.
        """
        sql = "UPDATE clients SET first_name = %s, last_name = %s, email = %s WHERE id = %s"
        with self.db.transaction() as cur:
            cur.execute(sql, (first_name, last_name, email, client_id))
            updated = cur.rowcount > 0
        if updated:
            logger.info(f"Updated client #{client_id}")
        return updated

    # ── DELETE ────────────────────────────────────────────

    def delete_phone(self, phone_id: int) -> bool:
        """Delete a single phone. Returns False if it did not exist."""
        sql = "DELETE FROM phones WHERE id = %s"
        with self.db.transaction() as cur:
            cur.execute(sql, (phone_id,))
            deleted = cur.rowcount > 0
        if deleted:
            logger.info(f"Deleted phone #{phone_id}")
        return deleted

    def delete_client(self, client_id: int) -> bool:
        """Delete a client; its phones go with it (ON DELETE CASCADE)."""
        sql = "DELETE FROM clients WHERE id = %s"
        with self.db.transaction() as cur:
            cur.execute(sql, (client_id,))
            deleted = cur.rowcount > 0
        if deleted:
            logger.info(f"Deleted client #{client_id}")
        return deleted
