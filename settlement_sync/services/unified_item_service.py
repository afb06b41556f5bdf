"""
Unified Item Service

Merges bitjita's item and cargo catalogs into one searchable list of
UnifiedItem, persisted to a JSON cache file with a one-hour lifetime.

State machine: empty -> loading -> ready, or loading -> error (items stay
empty). Subscribers are notified on entering and leaving the loading state.
"""

import json
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, List, Optional

from ..core.data_paths import ensure_directory, get_bundled_data_path, get_cache_directory
from ..models import UnifiedItem

CACHE_FILENAME = "unified_items_cache.json"
CACHE_VERSION = 1
STATIC_CARGO_FILENAME = "static_cargo.json"
SEARCH_RESULT_LIMIT = 50

STATE_EMPTY = "empty"
STATE_LOADING = "loading"
STATE_READY = "ready"
STATE_ERROR = "error"


def load_static_cargo() -> list:
    """Frozen cargo catalog shipped with the package, used when the cargo feed is down."""
    try:
        with open(get_bundled_data_path(STATIC_CARGO_FILENAME), "r", encoding="utf-8") as f:
            data = json.load(f)
        return data if isinstance(data, list) else []
    except (OSError, ValueError) as e:
        logging.warning(f"Could not load static cargo data: {e}")
        return []


class UnifiedItemService:
    """
    Process-wide catalog cache. Create one instance and share it.
    """

    def __init__(self, bitjita_client, cache_dir: Optional[str] = None, max_age_seconds: float = 3600, time_func: Callable[[], float] = time.time):
        """
        Initialize the service and hydrate from the cache file when it is valid.

        Args:
            bitjita_client: Client with fetch_items() and fetch_cargo()
            cache_dir: Directory of the cache file (defaults to the user cache directory)
            max_age_seconds: Cache lifetime
            time_func: Returns the current epoch seconds; injectable for tests
        """
        self.bitjita_client = bitjita_client
        self.cache_dir = Path(cache_dir) if cache_dir else get_cache_directory()
        self.cache_file = self.cache_dir / CACHE_FILENAME
        self.max_age_seconds = max_age_seconds
        self.time_func = time_func

        self.items: List[UnifiedItem] = []
        self.timestamp: Optional[float] = None
        self.state = STATE_EMPTY
        self.last_error: Optional[str] = None

        self._lock = threading.Lock()
        self._subscribers: List[Callable[[], None]] = []
        self._fetch_thread: Optional[threading.Thread] = None

        self._hydrate()

    # Cache file

    def _hydrate(self):
        if not self.cache_file.exists():
            logging.debug("Unified item cache file not found")
            return

        try:
            with open(self.cache_file, "r", encoding="utf-8") as f:
                cached = json.load(f)
        except (OSError, ValueError) as e:
            logging.warning(f"Error loading unified item cache: {e}")
            return

        if not isinstance(cached, dict) or not isinstance(cached.get("items"), list) or not isinstance(cached.get("timestamp"), (int, float)):
            logging.warning("Unified item cache has an invalid structure")
            return
        if cached.get("version") != CACHE_VERSION:
            logging.info(f"Unified item cache version mismatch: {cached.get('version')} != {CACHE_VERSION}")
            return

        age = self.time_func() - cached["timestamp"]
        if age >= self.max_age_seconds:
            logging.info(f"Unified item cache expired: {age:.1f}s >= {self.max_age_seconds}s")
            return

        try:
            items = [UnifiedItem.from_dict(item) for item in cached["items"]]
        except ValueError as e:
            logging.warning(f"Unified item cache contains invalid items: {e}")
            return

        self.items = items
        self.timestamp = cached["timestamp"]
        self.state = STATE_READY
        logging.info(f"Loaded {len(items)} unified items from cache")

    def _save(self):
        if not ensure_directory(self.cache_dir):
            return
        try:
            with open(self.cache_file, "w", encoding="utf-8") as f:
                json.dump(
                    {"items": [item.to_dict() for item in self.items], "timestamp": self.timestamp, "version": CACHE_VERSION},
                    f,
                    separators=(",", ":"),
                )
        except OSError as e:
            logging.warning(f"Error saving unified item cache: {e}")

    # Subscribers

    def subscribe(self, callback: Callable[[], None]) -> Callable[[], None]:
        """
        Register a change callback.

        Returns:
            A function that removes the callback
        """
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe():
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self):
        with self._lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback()
            except Exception as e:
                logging.error(f"Unified item subscriber failed: {e}")

    # Fetching

    def _fetch_items(self) -> list:
        try:
            return self.bitjita_client.fetch_items()
        except Exception as e:
            logging.error(f"Failed to fetch items: {e}")
            return []

    def _fetch_cargo(self) -> list:
        try:
            return self.bitjita_client.fetch_cargo()
        except Exception as e:
            logging.warning(f"Cargo API failed, using static data: {e}")
            return load_static_cargo()

    def fetch_and_cache_items(self) -> bool:
        """
        Fetch both catalogs, rebuild the unified list and persist it.

        Returns:
            True when the cache was rebuilt; False if a fetch was already in
            progress or the rebuild failed
        """
        with self._lock:
            if self.state == STATE_LOADING:
                logging.debug("Unified item fetch already in progress")
                return False
            self.state = STATE_LOADING
        self._notify()

        try:
            with ThreadPoolExecutor(max_workers=2, thread_name_prefix="CatalogFetch") as executor:
                items_future = executor.submit(self._fetch_items)
                cargo_future = executor.submit(self._fetch_cargo)
                raw_items = items_future.result()
                raw_cargo = cargo_future.result()

            unified = [UnifiedItem.from_item(item) for item in raw_items if isinstance(item, dict)]
            unified.extend(UnifiedItem.from_cargo(cargo) for cargo in raw_cargo if isinstance(cargo, dict))

            with self._lock:
                self.items = unified
                self.timestamp = self.time_func()
                self.state = STATE_READY
                self.last_error = None
            self._save()
            logging.info(f"Cached {len(unified)} unified items ({len(raw_items)} items, {len(raw_cargo)} cargos)")
            return True

        except Exception as e:
            logging.error(f"Failed to fetch and cache items: {e}")
            with self._lock:
                self.items = []
                self.state = STATE_ERROR
                self.last_error = str(e)
            return False

        finally:
            self._notify()

    def ensure_fresh(self) -> bool:
        """
        Start a background fetch if the cache is invalid and nothing is loading.

        Returns:
            True if a fetch was started
        """
        if self.is_cache_valid() or self.is_loading():
            return False
        if self._fetch_thread and self._fetch_thread.is_alive():
            return False

        self._fetch_thread = threading.Thread(target=self.fetch_and_cache_items, daemon=True, name="UnifiedItemFetch")
        self._fetch_thread.start()
        return True

    # Queries

    def get_items(self) -> List[UnifiedItem]:
        return list(self.items)

    def is_loading(self) -> bool:
        return self.state == STATE_LOADING

    def is_cache_valid(self) -> bool:
        if self.timestamp is None or not self.items:
            return False
        return self.time_func() - self.timestamp < self.max_age_seconds

    def clear_cache(self):
        """Forget all items and delete the cache file."""
        with self._lock:
            self.items = []
            self.timestamp = None
            self.state = STATE_EMPTY
        try:
            if self.cache_file.exists():
                self.cache_file.unlink()
        except OSError as e:
            logging.warning(f"Error removing unified item cache file: {e}")
        self._notify()

    def get_item_by_id(self, item_id) -> Optional[UnifiedItem]:
        item_id = str(item_id)
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def search_items(self, query: str) -> List[UnifiedItem]:
        """
        Case-insensitive search over name, description, category and tag.
        A blank query returns the first 50 items.
        """
        if not query or not query.strip():
            return self.items[:SEARCH_RESULT_LIMIT]

        needle = query.lower()
        results = []
        for item in self.items:
            haystacks = (item.name, item.description, item.category, item.tag)
            if any(text and needle in str(text).lower() for text in haystacks):
                results.append(item)
        return results
