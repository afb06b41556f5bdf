from .item_lookup_service import ItemLookupService

__all__ = ["ItemLookupService"]
