"""
Settlement inventory reads for the inventory view, with a short in-memory cache.
"""

import logging
import threading
import time
from typing import Callable, Dict, List, Optional, Tuple

from ..core.errors import SettlementSyncError
from ..core.processors import InventoryProcessor
from .persistence_sync import INVENTORY_TABLE

CACHE_DURATION_SECONDS = 5 * 60


class SettlementInventoryService:
    """
    Fetches a settlement's inventory from the inventories API and caches the
    normalized rows per settlement. When the API is unreachable and a store is
    configured, the last synced rows are read from the database instead.
    """

    def __init__(self, bitjita_client, store=None, cache_duration_seconds: float = CACHE_DURATION_SECONDS, time_func: Callable[[], float] = time.time):
        self.bitjita_client = bitjita_client
        self.store = store
        self.cache_duration_seconds = cache_duration_seconds
        self.time_func = time_func
        self._cache: Dict[str, Tuple[List[dict], float]] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _cache_key(settlement_id: str) -> str:
        return f"settlement_{settlement_id}"

    def fetch_settlement_inventory(self, settlement_id: str) -> List[dict]:
        """
        Get the inventory rows of a settlement.

        Args:
            settlement_id: Claim entity id

        Returns:
            Inventory rows as dicts (InventoryItemRecord fields)

        Raises:
            SettlementSyncError: If the API fails and there is no store to fall back to
        """
        key = self._cache_key(settlement_id)
        with self._lock:
            cached = self._cache.get(key)
        if cached and self.time_func() - cached[1] < self.cache_duration_seconds:
            logging.debug(f"[SettlementInventoryService] Returning cached data: {len(cached[0])} items")
            return list(cached[0])

        try:
            data = self.bitjita_client.fetch_claim_inventories(settlement_id)
        except SettlementSyncError as e:
            logging.error(f"[SettlementInventoryService] Error fetching settlement inventory: {e}")
            if self.store is None:
                raise
            return self._load_from_store(settlement_id)

        if InventoryProcessor.get_buildings(data) is None:
            logging.warning("[SettlementInventoryService] Missing buildings in response")
            return []

        records = InventoryProcessor(settlement_id=settlement_id).process(data)
        rows = [record.to_dict() for record in records]

        with self._lock:
            self._cache[key] = (rows, self.time_func())
        logging.info(f"[SettlementInventoryService] Cached and returning: {len(rows)} items")
        return list(rows)

    def _load_from_store(self, settlement_id: str) -> List[dict]:
        logging.info(f"[SettlementInventoryService] Falling back to stored inventory for {settlement_id}")
        return self.store.select(
            INVENTORY_TABLE,
            filters={"settlement_id": f"eq.{settlement_id}"},
            order="location.asc,item_name.asc",
        )

    def clear_cache(self, settlement_id: Optional[str] = None):
        """Clear one settlement's cached rows, or all of them."""
        with self._lock:
            if settlement_id:
                self._cache.pop(self._cache_key(settlement_id), None)
                logging.info(f"[SettlementInventoryService] Cleared cache for settlement: {settlement_id}")
            else:
                self._cache.clear()
                logging.info("[SettlementInventoryService] Cleared all cache")

    def get_cache_info(self) -> Dict:
        now = self.time_func()
        with self._lock:
            entries = [
                {
                    "settlement": key,
                    "item_count": len(rows),
                    "age": now - cached_at,
                    "expired": now - cached_at > self.cache_duration_seconds,
                }
                for key, (rows, cached_at) in self._cache.items()
            ]
        return {"total_entries": len(entries), "entries": entries}
