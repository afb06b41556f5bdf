"""
Exception types shared across the settlement sync worker.
"""

from typing import Optional


class SettlementSyncError(Exception):
    """Base class for all settlement sync errors."""


class ConfigurationError(SettlementSyncError):
    """Raised when required configuration is missing or invalid."""


class FetchError(SettlementSyncError):
    """Raised when a bitjita request fails or returns an unusable response."""

    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class PayloadParseError(SettlementSyncError):
    """Raised when an embedded script payload cannot be parsed."""

    def __init__(self, message: str, position: Optional[int] = None):
        if position is not None:
            message = f"{message} (at offset {position})"
        super().__init__(message)
        self.position = position


class StoreError(SettlementSyncError):
    """Raised when the settlement database rejects a request."""

    def __init__(self, message: str, table: Optional[str] = None, operation: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.table = table
        self.operation = operation
        self.status_code = status_code
