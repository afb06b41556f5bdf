"""
Models package for Settlement Sync.

Contains structured data classes for normalized settlement records and the
catalog/aggregate shapes used by the settlement views.
"""

from .records import (
    ItemLookupEntry,
    InventoryItemRecord,
    SettlementMemberRecord,
    SettlementSkillRecord,
    PlayerSummary,
)
from .unified_item import UnifiedItem
from .combined_inventory import CombinedInventoryItem, PackageBreakdown, PackageContribution

__all__ = [
    "ItemLookupEntry",
    "InventoryItemRecord",
    "SettlementMemberRecord",
    "SettlementSkillRecord",
    "PlayerSummary",
    "UnifiedItem",
    "CombinedInventoryItem",
    "PackageBreakdown",
    "PackageContribution",
]
