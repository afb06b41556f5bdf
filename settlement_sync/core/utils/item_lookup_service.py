"""
Item Lookup Service for resolving inventory contents against the claim page catalog.

Builds id-keyed lookup tables from the items[] and cargos[] arrays of a
settlement payload. A fresh instance is built for every scrape cycle.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from ...models import ItemLookupEntry

ITEM_SOURCE = "item"
CARGO_SOURCE = "cargo"


class ItemLookupService:
    """
    Service for looking up item and cargo information by id.

    Uses compound keys (item_id, source) so an id that exists in both the
    item and the cargo catalog never overwrites the other entry.
    """

    def __init__(self, items: Optional[Iterable[dict]] = None, cargos: Optional[Iterable[dict]] = None):
        """
        Initialize the service with catalog arrays.

        Args:
            items: Raw item objects (id, name, tier, rarityStr, iconAssetName)
            cargos: Raw cargo objects with the same fields
        """
        self._lookups: Dict[Tuple[object, str], ItemLookupEntry] = {}
        self._item_count = self._load_source(items or [], ITEM_SOURCE)
        self._cargo_count = self._load_source(cargos or [], CARGO_SOURCE)

    def _load_source(self, entries: Iterable[dict], source: str) -> int:
        loaded = 0
        for raw in entries:
            try:
                entry = ItemLookupEntry.from_dict(raw)
            except ValueError:
                # Only entries with complete data are usable
                continue
            self._lookups[(entry.id, source)] = entry
            loaded += 1
        return loaded

    @staticmethod
    def source_for_type(item_type: Optional[str]) -> str:
        """Map an inventory content item_type to its catalog."""
        return CARGO_SOURCE if item_type == "cargo" else ITEM_SOURCE

    @property
    def item_count(self) -> int:
        return self._item_count

    @property
    def cargo_count(self) -> int:
        return self._cargo_count

    def lookup(self, item_id, item_type: Optional[str] = None) -> Optional[ItemLookupEntry]:
        """
        Look up a catalog entry.

        Args:
            item_id: The item or cargo id from the inventory slot
            item_type: "cargo" routes to the cargo catalog; anything else to items

        Returns:
            ItemLookupEntry or None if not found
        """
        if item_id is None:
            return None
        return self._lookups.get((item_id, self.source_for_type(item_type)))

    def get_item_name(self, item_id, item_type: Optional[str] = None) -> str:
        """
        Get the display name for an item.

        Returns:
            Item name or "Unknown Item (ID)" if not found
        """
        entry = self.lookup(item_id, item_type)
        if entry:
            return entry.name
        return f"Unknown Item ({item_id})"

    def find_entries_by_id(self, item_id) -> List[ItemLookupEntry]:
        """Find every catalog entry with this id, across both catalogs."""
        return [entry for (entry_id, _), entry in self._lookups.items() if entry_id == item_id]

    def get_stats(self) -> Dict[str, int]:
        return {"items": self._item_count, "cargos": self._cargo_count, "total": len(self._lookups)}

    def log_stats(self):
        logging.info(f"✓ Loaded {self._item_count} items and {self._cargo_count} cargos for lookup")
