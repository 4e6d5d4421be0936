"""
main.py
-------
Entry point for the client registry demonstration.

Responsibilities:
    - Open the configured database and make sure the schema exists.
    - Run a fixed sequence of client/phone mutations and one search.
    - Report progress on stdout and any failure on stderr.
"""

import sys
from typing import Optional

from config import DATABASE_URL
from db.connection import Database
from models.result import ErrorKind
from repositories.client_repo import ClientRepository
from services.client_service import ClientService
from utils.logger import get_logger

logger = get_logger(__name__)

DEMO_PHONE_TO_DELETE = 1


def run_demo(service: ClientService) -> None:
    """
    Execute the scripted sequence against an open service.

    Raises:
        ClientOperationError: On the first failed step (except a missing phone).
    """
    # ── 1. Schema ─────────────────────────────────────────
    service.ensure_schema().unwrap()
    print("Tables created.")

    # ── 2. Create ─────────────────────────────────────────
    client_id = service.add_client("Ivan", "Ivanov", "ivan@example.com").unwrap()
    print(f"Client added with ID: {client_id}")

    for number in ("+123456789", "+987654321"):
        service.add_phone(client_id, number).unwrap()
        print("Phone added.")

    # ── 3. Update ─────────────────────────────────────────
    service.update_client(client_id, "Ivan", "Petrov", "ivan.petrov@example.com").unwrap()
    print("Client updated.")

    # ── 4. Search ─────────────────────────────────────────
    print("\n-- Search for 'Ivan' --")
    for row in service.find_clients("Ivan").unwrap():
        print(row)

    # ── 5. Delete ─────────────────────────────────────────
    result = service.delete_phone(DEMO_PHONE_TO_DELETE)
    if result.error is ErrorKind.NOT_FOUND:
        print(f"Phone {DEMO_PHONE_TO_DELETE} not found.")
    else:
        result.unwrap()
        print("Phone deleted.")

    service.delete_client(client_id).unwrap()
    print("Client deleted.")


def main(database_url: Optional[str] = None) -> int:
    """Run the demonstration. Always returns exit status 0."""
    db: Optional[Database] = None
    try:
        db = Database(database_url or DATABASE_URL)
        run_demo(ClientService(ClientRepository(db)))
    except Exception as e:
        logger.debug("Demo aborted", exc_info=True)
        print(f"ERROR: {e}", file=sys.stderr)
    finally:
        if db is not None:
            db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
