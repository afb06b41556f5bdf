"""
Normalized settlement records produced by each scrape cycle.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass
class ItemLookupEntry:
    """
    Catalog entry used to resolve inventory contents.
    Built from the page's items[] / cargos[] arrays; never persisted.
    """

    id: int
    name: str
    tier: Optional[int] = None
    rarity: str = "Common"
    icon_asset_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "ItemLookupEntry":
        """Create an entry from a bitjita item or cargo object."""
        if not isinstance(data, dict):
            raise ValueError(f"Invalid catalog entry: expected dict, got {type(data)}")
        if not data.get("id") or not data.get("name"):
            raise ValueError("Catalog entry requires id and name")

        return cls(
            id=data["id"],
            name=data["name"],
            tier=data.get("tier"),
            rarity=data.get("rarityStr") or "Common",
            icon_asset_name=data.get("iconAssetName"),
        )


@dataclass
class InventoryItemRecord:
    """One occupied inventory slot. ``id`` is ``{building_id}-{slot_index}``."""

    id: str
    building_id: Any
    building_name: Optional[str]
    building_nickname: Optional[str]
    building_type: Any
    item_id: Any
    item_name: str
    item_type: str
    quantity: int
    tier: Optional[int]
    rarity: Optional[str]
    icon: Optional[str]
    location: str
    slot_index: int
    settlement_id: Optional[str] = None
    timestamp: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SettlementMemberRecord:
    """A settlement member with permission flags and derived role."""

    id: Any
    player_id: Any
    player: Optional[str]
    storage: bool
    build: bool
    officer: bool
    co_owner: bool
    role: str
    is_online: bool
    last_login: Any = None
    last_seen: Any = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    settlement_id: Optional[str] = None
    timestamp: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_row(self) -> Dict[str, Any]:
        """Column mapping of the settlement_members table (id is generated by the database)."""
        return {
            "player": self.player,
            "storage": self.storage,
            "build": self.build,
            "officer": self.officer,
            "co_owner": self.co_owner,
            "is_online": self.is_online,
            "role": self.role,
            "last_seen": self.last_seen,
            "player_id": self.player_id,
            "entity_id": self.id,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "settlement_id": self.settlement_id,
        }


@dataclass
class SettlementSkillRecord:
    """
    One (player, skill) pair. The per-player aggregates are repeated on every
    row of that player for simple tabular reads.
    """

    id: str
    player_id: Any
    username: Optional[str]
    skill_id: Optional[int]
    skill_name: str
    skill_level: Optional[int]
    total_skills: Optional[int] = None
    highest_level: Optional[int] = None
    total_level: Optional[int] = None
    total_xp: Optional[int] = None
    settlement_id: Optional[str] = None
    timestamp: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class PlayerSummary:
    """Per-citizen skill aggregates, for read models that join instead of denormalizing."""

    player_id: Any
    username: Optional[str]
    skill_count: int
    total_skills: Optional[int] = None
    highest_level: Optional[int] = None
    total_level: Optional[int] = None
    total_xp: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
