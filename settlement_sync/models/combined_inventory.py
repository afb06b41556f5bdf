"""
View-level aggregate of settlement inventory grouped by base item name.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class PackageContribution:
    """Quantity contributed by one packaged variant of a base item."""

    name: str
    quantity: int
    multiplier: int
    contribution: int


@dataclass
class PackageBreakdown:
    base_quantity: int = 0
    package_items: List[PackageContribution] = field(default_factory=list)


@dataclass
class CombinedInventoryItem:
    """
    Total on-hand quantity of a base item across all of its package variants.
    ``package_breakdown`` keeps the audit trail of where the total came from.
    """

    item_name: str
    tier: Optional[int] = None
    rarity: Optional[str] = None
    total_quantity: int = 0
    icon: Optional[str] = None
    package_breakdown: PackageBreakdown = field(default_factory=PackageBreakdown)
    target_quantity: Optional[int] = None
    target_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
