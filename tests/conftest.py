import sys
from pathlib import Path

import pytest

# Ensure project root on sys.path
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from db.connection import Database  # noqa: E402
from repositories.client_repo import ClientRepository  # noqa: E402
from services.client_service import ClientService  # noqa: E402


@pytest.fixture()
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'clients_test.db'}"


@pytest.fixture()
def db(db_url):
    database = Database(db_url)
    try:
        yield database
    finally:
        database.close()


@pytest.fixture()
def repo(db):
    repository = ClientRepository(db)
    repository.ensure_schema()
    return repository


@pytest.fixture()
def service(repo):
    return ClientService(repo)


@pytest.fixture()
def ivan(repo):
    """The demo client with two phones; returns (client_id, [phone ids])."""
    client_id = repo.add_client("Ivan", "Ivanov", "ivan@example.com")
    phone_ids = [
        repo.add_phone(client_id, "+123456789"),
        repo.add_phone(client_id, "+987654321"),
    ]
    return client_id, phone_ids
