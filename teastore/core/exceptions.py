"""Custom exceptions for teastore."""
from __future__ import annotations


class TeaStoreException(Exception):
    """Base exception for all teastore errors."""

    def __init__(self, message: str, *args: object) -> None:
        super().__init__(message, *args)
        self.message = message


class ConfigurationException(TeaStoreException):
    """Configuration errors."""

    pass


class ValidationException(TeaStoreException):
    """Input validation errors."""

    pass


class BackendException(TeaStoreException):
    """Backend data service call failed."""

    def __init__(self, message: str, *, table: str | None = None, code: str | None = None) -> None:
        super().__init__(message)
        self.table = table
        self.code = code


class RecordNotFoundException(BackendException):
    """Record not found in a backend collection."""

    def __init__(self, table: str, record_id: object) -> None:
        super().__init__(f"Record {record_id} not found in {table}", table=table)
        self.record_id = record_id


class AuthException(TeaStoreException):
    """Authentication service errors."""

    pass


class PaymentProviderException(TeaStoreException):
    """Payment intent creation or payment sheet errors."""

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code
