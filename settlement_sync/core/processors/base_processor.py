"""
Base processor class for normalizing settlement payloads.

All record processors inherit from this class and implement the standard
interface for turning a raw settlement payload into flat records.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, List, Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BaseProcessor(ABC):
    """
    Abstract base class for all record processors.

    Processors are pure transforms: they hold no state between calls, so the
    same payload always yields the same records apart from timestamps.
    """

    def __init__(self, settlement_id: Optional[str] = None, clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize the processor.

        Args:
            settlement_id: Settlement the produced records belong to
            clock: Returns the current UTC time; injectable for tests
        """
        self.settlement_id = settlement_id
        self.clock = clock or utc_now

    @abstractmethod
    def process(self, settlement_data: Optional[dict]) -> List:
        """
        Normalize a settlement payload.

        Args:
            settlement_data: Payload from the page extractor or the inventories API

        Returns:
            List of record dataclasses; empty if the payload lacks this record type
        """
        pass

    @abstractmethod
    def get_record_type(self) -> str:
        """Return the record type this processor produces (e.g. 'inventory')."""
        pass

    def _timestamp(self) -> str:
        return self.clock().isoformat()

    def _log_result(self, records: List, detail: str = ""):
        suffix = f" {detail}" if detail else ""
        logging.info(f"✓ Processed {len(records)} {self.get_record_type()} records{suffix}")
