"""
models/client.py
----------------
Domain models for clients, their phone numbers and search results.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Client:
    """
    Represents a person record.

    Attributes:
        first_name: Required given name.
        last_name: Required family name.
        email: Optional contact email.
        id: Database primary key (None for new records).
    """
    first_name: str
    last_name: str
    email: Optional[str] = None
    id: Optional[int] = None


@dataclass
class Phone:
    """A phone number owned by exactly one client."""
    client_id: int
    phone_number: Optional[str] = None
    id: Optional[int] = None


@dataclass
class ClientSearchRow:
    """
    One row of a client search: a client joined with at most one phone.

    Clients without phones produce a single row with ``phone_number=None``.
    """
    client_id: int
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone_number: Optional[str] = None

    def __str__(self) -> str:
        return (
            f"ID: {self.client_id}, Name: {self.first_name} {self.last_name}, "
            f"Email: {self.email or ''}, Phone: {self.phone_number or ''}"
        )
