from .bitjita_client import BitjitaClient
from .store_client import SupabaseStore

__all__ = ["BitjitaClient", "SupabaseStore"]
