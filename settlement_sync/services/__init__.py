"""
Services for persisting, exporting and presenting settlement data.
"""

from .persistence_sync import PersistenceSyncService, SyncResult
from .snapshot_export_service import SnapshotExportService
from .unified_item_service import UnifiedItemService
from .settlement_inventory_service import SettlementInventoryService
from .package_resolver import PACKAGE_RULES, PackageRule, combine_inventory, get_package_info, group_by_location

__all__ = [
    "PersistenceSyncService",
    "SyncResult",
    "SnapshotExportService",
    "UnifiedItemService",
    "SettlementInventoryService",
    "PACKAGE_RULES",
    "PackageRule",
    "combine_inventory",
    "get_package_info",
    "group_by_location",
]
