"""
Core scraping, normalization and scheduling for Settlement Sync.
"""

from .errors import ConfigurationError, FetchError, PayloadParseError, SettlementSyncError, StoreError

__all__ = ["SettlementSyncError", "ConfigurationError", "FetchError", "PayloadParseError", "StoreError"]
