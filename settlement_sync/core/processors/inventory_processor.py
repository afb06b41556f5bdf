"""
Inventory processor for flattening building inventories into slot records.
"""

import logging
from typing import List, Optional

from ...models import InventoryItemRecord
from ..utils import ItemLookupService
from .base_processor import BaseProcessor

# Keys under which the inventories API has published the building list
BUILDING_LIST_KEYS = ("buildings", "containers", "inventories")


class InventoryProcessor(BaseProcessor):
    """
    Walks building -> inventory slot -> contents and emits one
    InventoryItemRecord per occupied slot.

    Handles both the claim page payload (``slot.contents.item_id``) and the
    looser shapes the inventories API has returned over time.
    """

    def get_record_type(self):
        return "inventory"

    @staticmethod
    def get_buildings(settlement_data: Optional[dict]) -> Optional[list]:
        """Return the building list of a payload, or None if it has none."""
        if not isinstance(settlement_data, dict):
            return None
        for key in BUILDING_LIST_KEYS:
            buildings = settlement_data.get(key)
            if isinstance(buildings, list):
                return buildings
        return None

    def process(self, settlement_data):
        buildings = self.get_buildings(settlement_data)
        if buildings is None:
            logging.info("❌ No inventory data found")
            return []

        lookup_service = ItemLookupService(settlement_data.get("items"), settlement_data.get("cargos"))
        lookup_service.log_stats()

        timestamp = self._timestamp()
        records: List[InventoryItemRecord] = []
        for building_index, building in enumerate(buildings):
            if not isinstance(building, dict):
                continue
            records.extend(self._process_building(building, building_index, lookup_service, timestamp))

        self._log_result(records, f"from {len(buildings)} buildings")
        return records

    def _process_building(self, building: dict, building_index: int, lookup_service: ItemLookupService, timestamp: str) -> List[InventoryItemRecord]:
        inventory = building.get("inventory")
        if not isinstance(inventory, list):
            return []

        building_id = building.get("entityId") or building.get("id") or building_index
        building_name = building.get("buildingName") or building.get("name")
        building_nickname = building.get("buildingNickname") or building.get("nickname")
        location = building_nickname or building_name or "Unknown Container"

        records = []
        for slot_index, slot in enumerate(inventory):
            if not isinstance(slot, dict):
                continue
            contents = slot.get("contents") or slot.get("item")
            if not contents or not isinstance(contents, dict):
                continue

            item_id = contents.get("item_id", contents.get("id"))
            item_type = contents.get("item_type") or contents.get("type") or "item"
            entry = lookup_service.lookup(item_id, item_type)

            if entry:
                item_name = entry.name
                tier = entry.tier
                rarity = entry.rarity
                icon = entry.icon_asset_name
            else:
                item_name = contents.get("name") or contents.get("item_name") or f"Unknown Item ({item_id})"
                tier = contents.get("tier")
                rarity = contents.get("rarity") or contents.get("rarityStr") or "Unknown"
                icon = contents.get("icon") or contents.get("iconAssetName") or building.get("iconAssetName")

            records.append(
                InventoryItemRecord(
                    id=f"{building_id}-{slot_index}",
                    building_id=building_id,
                    building_name=building_name or f"Building {building_index}",
                    building_nickname=building_nickname,
                    building_type=building.get("buildingDescriptionId") or building.get("type") or 0,
                    item_id=item_id,
                    item_name=item_name,
                    item_type=item_type,
                    quantity=contents.get("quantity") or 1,
                    tier=tier,
                    rarity=rarity,
                    icon=icon,
                    location=location,
                    slot_index=slot_index,
                    settlement_id=self.settlement_id,
                    timestamp=timestamp,
                )
            )

        return records
