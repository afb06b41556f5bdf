"""
Tests for the cached settlement inventory reads.
"""

import pytest

from settlement_sync.core.errors import FetchError
from settlement_sync.services import SettlementInventoryService
from settlement_sync.services.persistence_sync import INVENTORY_TABLE
from tests.conftest import InMemoryStore, MockBitjitaClient


class FakeClock:
    def __init__(self):
        self.now = 5000.0

    def __call__(self):
        return self.now


class TestSettlementInventoryService:
    def setup_method(self):
        self.clock = FakeClock()

    def test_fetch_normalizes_api_payload(self, inventory_payload):
        client = MockBitjitaClient(inventories={"111": inventory_payload})
        service = SettlementInventoryService(client, time_func=self.clock)

        rows = service.fetch_settlement_inventory("111")

        assert [row["item_name"] for row in rows] == ["Wood", "Wood Package", "Rough Wood Log"]
        assert rows[0]["settlement_id"] == "111"

    def test_cached_within_five_minutes(self, inventory_payload):
        client = MockBitjitaClient(inventories={"111": inventory_payload})
        service = SettlementInventoryService(client, time_func=self.clock)

        service.fetch_settlement_inventory("111")
        self.clock.now += 299
        service.fetch_settlement_inventory("111")
        assert client.inventory_fetches == ["111"]

        self.clock.now += 1
        service.fetch_settlement_inventory("111")
        assert client.inventory_fetches == ["111", "111"]

    def test_clear_cache_forces_refetch(self, inventory_payload):
        client = MockBitjitaClient(inventories={"111": inventory_payload, "222": inventory_payload})
        service = SettlementInventoryService(client, time_func=self.clock)
        service.fetch_settlement_inventory("111")
        service.fetch_settlement_inventory("222")

        service.clear_cache("111")
        assert [entry["settlement"] for entry in service.get_cache_info()["entries"]] == ["settlement_222"]

        service.clear_cache()
        assert service.get_cache_info() == {"total_entries": 0, "entries": []}

    def test_cache_info_reports_expiry(self, inventory_payload):
        client = MockBitjitaClient(inventories={"111": inventory_payload})
        service = SettlementInventoryService(client, time_func=self.clock)
        service.fetch_settlement_inventory("111")

        self.clock.now += 301
        entry = service.get_cache_info()["entries"][0]

        assert entry["item_count"] == 3
        assert entry["expired"] is True

    def test_missing_buildings_returns_empty(self):
        client = MockBitjitaClient(inventories={"111": {"items": []}})
        service = SettlementInventoryService(client, time_func=self.clock)

        assert service.fetch_settlement_inventory("111") == []

    def test_fetch_failure_falls_back_to_store(self):
        store = InMemoryStore({INVENTORY_TABLE: [{"item_name": "Stone", "settlement_id": "111"}, {"item_name": "Clay", "settlement_id": "222"}]})
        client = MockBitjitaClient(inventories={"111": FetchError("down")})
        service = SettlementInventoryService(client, store=store, time_func=self.clock)

        rows = service.fetch_settlement_inventory("111")

        assert rows == [{"item_name": "Stone", "settlement_id": "111"}]

    def test_fetch_failure_without_store_raises(self):
        client = MockBitjitaClient(inventories={"111": FetchError("down")})
        service = SettlementInventoryService(client, time_func=self.clock)

        with pytest.raises(FetchError):
            service.fetch_settlement_inventory("111")
