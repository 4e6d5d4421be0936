"""
models/result.py
----------------
Explicit result values returned by the service layer instead of raising
storage exceptions at the caller.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    """Classification of a failed operation."""
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    REFERENTIAL = "referential"
    CONNECTION = "connection"
    STORAGE = "storage"


class ClientOperationError(Exception):
    """Raised by :meth:`OperationResult.unwrap` for a failed result."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"


@dataclass(frozen=True)
class OperationResult:
    """
    Outcome of a single service operation.

    Attributes:
        value: The operation's return value when it succeeded.
        error: None on success, otherwise the failure classification.
        message: Human-readable description of the failure.
    """
    value: Any = None
    error: Optional[ErrorKind] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Any = None) -> "OperationResult":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "OperationResult":
        return cls(error=kind, message=message)

    def unwrap(self) -> Any:
        """Return the value, or raise ClientOperationError if the operation failed."""
        if self.error is not None:
            raise ClientOperationError(self.error, self.message)
        return self.value
