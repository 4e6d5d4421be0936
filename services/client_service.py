"""
services/client_service.py
---------------------------
Business logic for client records.

Every operation returns an OperationResult instead of raising storage
errors, so callers can branch on the failure kind.
"""

import sqlite3
from typing import Callable, Optional

import psycopg2
from psycopg2 import errorcodes

from models.result import ErrorKind, OperationResult
from repositories.client_repo import ClientRepository
from utils.logger import get_logger

logger = get_logger(__name__)

_STORAGE_ERRORS = (psycopg2.Error, sqlite3.Error)


def classify_error(exc: Exception) -> ErrorKind:
    """
    Map a psycopg2 / sqlite3 exception to an ErrorKind.

    Args:
        exc: The exception raised by the database driver.

    Returns:
        The matching ErrorKind; STORAGE when nothing more specific applies.
    """
    if isinstance(exc, psycopg2.Error):
        if exc.pgcode == errorcodes.FOREIGN_KEY_VIOLATION:
            return ErrorKind.REFERENTIAL
        if exc.pgcode == errorcodes.NOT_NULL_VIOLATION:
            return ErrorKind.VALIDATION
        if isinstance(exc, (psycopg2.OperationalError, psycopg2.InterfaceError)):
            return ErrorKind.CONNECTION
        return ErrorKind.STORAGE

    if isinstance(exc, sqlite3.IntegrityError):
        text = str(exc).upper()
        if "FOREIGN KEY" in text:
            return ErrorKind.REFERENTIAL
        if "NOT NULL" in text:
            return ErrorKind.VALIDATION
        return ErrorKind.STORAGE
    if isinstance(exc, sqlite3.OperationalError) and "unable to open" in str(exc):
        return ErrorKind.CONNECTION
    return ErrorKind.STORAGE


def _require_name(value: Optional[str], field: str) -> Optional[str]:
    """Return an error message if a required name field is missing or blank."""
    if value is None or not str(value).strip():
        return f"{field} must be a non-empty string"
    return None


class ClientService:
    """
    Handles all business logic for clients and phones.

    Responsibilities:
        - Validate required fields before touching storage.
        - Delegate SQL to ClientRepository.
        - Convert storage failures and missing rows into OperationResult values.
    """

    def __init__(self, repo: ClientRepository):
        self.repo = repo

    def _run(self, action: str, func: Callable, *args) -> OperationResult:
        """Call a repository method and wrap its outcome."""
        try:
            return OperationResult.success(func(*args))
        except _STORAGE_ERRORS as e:
            kind = classify_error(e)
            logger.error(f"{action} failed ({kind.value}): {e}")
            return OperationResult.failure(kind, f"{action} failed: {e}")

    def _validate_names(self, first_name: Optional[str], last_name: Optional[str]) -> Optional[OperationResult]:
        problem = _require_name(first_name, "first_name") or _require_name(last_name, "last_name")
        if problem:
            logger.warning(f"Rejected client data: {problem}")
            return OperationResult.failure(ErrorKind.VALIDATION, problem)
        return None

    @staticmethod
    def _found(result: OperationResult, message: str) -> OperationResult:
        """Turn a False "row matched" flag into a NOT_FOUND failure."""
        if result.ok and not result.value:
            return OperationResult.failure(ErrorKind.NOT_FOUND, message)
        return result

    # ── Operations ────────────────────────────────────────

    def ensure_schema(self) -> OperationResult:
        return self._run("Schema creation", self.repo.ensure_schema)

    def add_client(self, first_name: str, last_name: str, email: Optional[str] = None) -> OperationResult:
        """
        Create a client.

        Returns:
            OperationResult whose value is the new client id.
        """
        invalid = self._validate_names(first_name, last_name)
        if invalid:
            return invalid
        return self._run("Adding client", self.repo.add_client, first_name, last_name, email)

    def add_phone(self, client_id: int, phone_number: Optional[str]) -> OperationResult:
        """
        Attach a phone to a client.

        Returns:
            OperationResult with the phone id, or REFERENTIAL for an unknown client.
        """
        return self._run("Adding phone", self.repo.add_phone, client_id, phone_number)

    def update_client(
        self, client_id: int, first_name: str, last_name: str, email: Optional[str]
    ) -> OperationResult:
        invalid = self._validate_names(first_name, last_name)
        if invalid:
            return invalid
        result = self._run(
            "Updating client", self.repo.update_client, client_id, first_name, last_name, email
        )
        return self._found(result, f"Client {client_id} not found")

    def delete_phone(self, phone_id: int) -> OperationResult:
        result = self._run("Deleting phone", self.repo.delete_phone, phone_id)
        return self._found(result, f"Phone {phone_id} not found")

    def delete_client(self, client_id: int) -> OperationResult:
        result = self._run("Deleting client", self.repo.delete_client, client_id)
        return self._found(result, f"Client {client_id} not found")

    def find_clients(self, keyword: str) -> OperationResult:
        """Search clients; the value is a list of ClientSearchRow."""
        return self._run("Searching clients", self.repo.find_clients, keyword)

    def get_client(self, client_id: int) -> OperationResult:
        result = self._run("Loading client", self.repo.get_client, client_id)
        if result.ok and result.value is None:
            return OperationResult.failure(ErrorKind.NOT_FOUND, f"Client {client_id} not found")
        return result

    def get_phones(self, client_id: int) -> OperationResult:
        return self._run("Loading phones", self.repo.get_phones, client_id)
