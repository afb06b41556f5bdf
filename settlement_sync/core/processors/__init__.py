"""
Record processors for settlement payloads.

Each processor is responsible for one record type and converts the raw
settlement payload into flat, database-ready records.
"""

from .base_processor import BaseProcessor
from .inventory_processor import InventoryProcessor
from .members_processor import MembersProcessor, derive_role, is_member_online
from .skills_processor import SkillsProcessor

__all__ = [
    "BaseProcessor",
    "InventoryProcessor",
    "MembersProcessor",
    "SkillsProcessor",
    "derive_role",
    "is_member_online",
]
