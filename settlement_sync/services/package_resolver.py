"""
Package/multiplier resolution for the combined inventory view.

Packaged variants of an item ("Wood Package") count as a fixed multiple of
the base item ("Wood"). Inventory rows are grouped by base name and totalled
with each variant's multiplier; the breakdown records where the total came
from.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from ..models import CombinedInventoryItem, PackageBreakdown, PackageContribution


@dataclass(frozen=True)
class PackageRule:
    suffix: str
    multiplier: int


@dataclass(frozen=True)
class PackageInfo:
    is_package: bool
    base_item_name: str
    multiplier: int


# Ordered: more specific suffixes first
PACKAGE_RULES: List[PackageRule] = [PackageRule(" Package", 100)]


def get_package_info(item_name: str, rules: Sequence[PackageRule] = PACKAGE_RULES) -> PackageInfo:
    """Classify an item name against the package rules; the first matching suffix wins."""
    for rule in rules:
        if rule.suffix and item_name.endswith(rule.suffix):
            return PackageInfo(True, item_name[: -len(rule.suffix)], rule.multiplier)
    return PackageInfo(False, item_name, 1)


def _field(row, name: str, default=None):
    if isinstance(row, dict):
        return row.get(name, default)
    return getattr(row, name, default)


def combine_inventory(
    records: Iterable,
    rules: Sequence[PackageRule] = PACKAGE_RULES,
    catalog: Optional[Iterable] = None,
    targets: Optional[Iterable[dict]] = None,
) -> List[CombinedInventoryItem]:
    """
    Group inventory rows by base item name and total them with package multipliers.

    Args:
        records: Inventory rows (InventoryItemRecord or dicts with item_name/quantity/tier/rarity/icon)
        rules: Package rules, most specific first
        catalog: Optional UnifiedItems or dicts; items absent from inventory are added with zero totals
        targets: Optional stock targets ({id, item_name, target_quantity}) attached by base name

    Returns:
        Combined items sorted by name, case-insensitively
    """
    combined: Dict[str, CombinedInventoryItem] = {}
    package_count = 0

    for record in records:
        item_name = _field(record, "item_name") or ""
        quantity = _field(record, "quantity") or 0
        info = get_package_info(item_name, rules)
        effective_quantity = quantity * info.multiplier

        entry = combined.get(info.base_item_name)
        if entry is None:
            entry = CombinedInventoryItem(
                item_name=info.base_item_name,
                tier=_field(record, "tier"),
                rarity=_field(record, "rarity"),
                icon=_field(record, "icon"),
            )
            combined[info.base_item_name] = entry

        entry.total_quantity += effective_quantity

        if not info.is_package:
            entry.package_breakdown.base_quantity += quantity
            continue

        package_count += 1
        logging.debug(f"📦 Package detected: '{item_name}' -> '{info.base_item_name}' ({quantity} x {info.multiplier} = {effective_quantity})")
        existing = next((p for p in entry.package_breakdown.package_items if p.name == item_name), None)
        if existing:
            existing.quantity += quantity
            existing.contribution += effective_quantity
        else:
            entry.package_breakdown.package_items.append(
                PackageContribution(name=item_name, quantity=quantity, multiplier=info.multiplier, contribution=effective_quantity)
            )

    if package_count:
        logging.debug(f"Package system processed {package_count} packaged items")

    for catalog_item in catalog or []:
        name = _field(catalog_item, "name")
        if not name:
            continue
        base_name = get_package_info(name, rules).base_item_name
        if base_name in combined:
            continue
        combined[base_name] = CombinedInventoryItem(
            item_name=base_name,
            tier=_field(catalog_item, "tier"),
            rarity=_field(catalog_item, "rarity"),
            icon=_field(catalog_item, "icon_asset_name") or _field(catalog_item, "iconAssetName"),
            package_breakdown=PackageBreakdown(),
        )

    for target in targets or []:
        base_name = get_package_info(target.get("item_name") or "", rules).base_item_name
        entry = combined.get(base_name)
        if entry:
            entry.target_quantity = target.get("target_quantity")
            entry.target_id = target.get("id")

    return sorted(combined.values(), key=lambda item: item.item_name.casefold())


def group_by_location(records: Iterable) -> Dict[str, list]:
    """Group inventory rows by container name, preserving row order."""
    groups: Dict[str, list] = {}
    for record in records:
        groups.setdefault(_field(record, "location"), []).append(record)
    return groups
