"""
Unified catalog item merging bitjita's item and cargo feeds into one shape.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union


@dataclass
class UnifiedItem:
    """
    Searchable catalog entry. ``type`` is "item" or "cargo".
    Serialized with the camelCase keys used by the bitjita feeds.
    """

    id: str
    name: str
    description: str
    tier: Union[int, str]
    rarity: str
    rarity_str: str
    icon_asset_name: str
    category: str
    type: str
    value: Optional[float] = None
    tag: Optional[str] = None
    volume: Optional[float] = None

    @classmethod
    def from_item(cls, item: dict) -> "UnifiedItem":
        """Map a raw /api/items record."""
        return cls(
            id=str(item.get("id")),
            name=item.get("name") or "",
            description=item.get("description") or "",
            tier=item.get("tier") or "Unknown",
            rarity=item.get("rarity") or "common",
            rarity_str=item.get("rarityStr") or item.get("rarity") or "Common",
            icon_asset_name=item.get("iconAssetName") or item.get("icon") or "",
            category=item.get("category") or "Items",
            type="item",
            value=item.get("value"),
        )

    @classmethod
    def from_cargo(cls, cargo: dict) -> "UnifiedItem":
        """Map a raw /api/cargo record."""
        return cls(
            id=str(cargo.get("id")),
            name=cargo.get("name") or "",
            description=cargo.get("description") or "",
            tier=cargo.get("tier") or 1,
            rarity=cargo.get("rarityStr") or "common",
            rarity_str=cargo.get("rarityStr") or "Common",
            icon_asset_name=cargo.get("iconAssetName") or "",
            category="Cargo",
            type="cargo",
            tag=cargo.get("tag"),
            volume=cargo.get("volume"),
        )

    @classmethod
    def from_dict(cls, data: dict) -> "UnifiedItem":
        """Restore an item serialized by to_dict (cache hydration)."""
        if not isinstance(data, dict) or "id" not in data:
            raise ValueError(f"Invalid unified item: {data!r}")

        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            description=data.get("description", ""),
            tier=data.get("tier", "Unknown"),
            rarity=data.get("rarity", "common"),
            rarity_str=data.get("rarityStr", "Common"),
            icon_asset_name=data.get("iconAssetName", ""),
            category=data.get("category", ""),
            type=data.get("type", "item"),
            value=data.get("value"),
            tag=data.get("tag"),
            volume=data.get("volume"),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "tier": self.tier,
            "rarity": self.rarity,
            "rarityStr": self.rarity_str,
            "iconAssetName": self.icon_asset_name,
            "category": self.category,
            "type": self.type,
        }
        for key in ("value", "tag", "volume"):
            if getattr(self, key) is not None:
                data[key] = getattr(self, key)
        return data
