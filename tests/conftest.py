"""
Pytest configuration and shared fixtures for Settlement Sync tests.

Provides mock collaborators (bitjita client, in-memory store, HTTP session),
claim page fixtures and utilities for testing scraping, normalization and
persistence without network access.
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from unittest.mock import Mock

import pytest
import requests

from settlement_sync.core.config import SyncConfig
from settlement_sync.core.errors import FetchError, StoreError

SESSION_ID = "abc123"
FIXED_NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


# ========== MOCK CLASSES ==========


class InMemoryStore:
    """In-memory stand-in for SupabaseStore supporting eq/neq filters."""

    def __init__(self, tables: Optional[Dict[str, List[dict]]] = None):
        self.tables: Dict[str, List[dict]] = {name: list(rows) for name, rows in (tables or {}).items()}
        self.calls: List[tuple] = []
        self.fail_on: Dict[tuple, StoreError] = {}

    def _matches(self, row: dict, filters: Dict[str, str]) -> bool:
        for column, expression in filters.items():
            operator, _, value = expression.partition(".")
            actual = "" if row.get(column) is None else str(row.get(column))
            if operator == "eq" and actual != value:
                return False
            if operator == "neq" and actual == value:
                return False
        return True

    def _maybe_fail(self, operation: str, table: str):
        error = self.fail_on.get((operation, table))
        if error:
            raise error

    def delete(self, table: str, filters: Dict[str, str]):
        self.calls.append(("delete", table, dict(filters)))
        self._maybe_fail("delete", table)
        if not filters:
            raise StoreError("Refusing unfiltered delete", table=table, operation="delete")
        self.tables[table] = [row for row in self.tables.get(table, []) if not self._matches(row, filters)]

    def insert(self, table: str, rows) -> int:
        rows = list(rows)
        self.calls.append(("insert", table, len(rows)))
        self._maybe_fail("insert", table)
        self.tables.setdefault(table, []).extend(dict(row) for row in rows)
        return len(rows)

    def select(self, table: str, filters=None, order=None) -> List[dict]:
        self.calls.append(("select", table, dict(filters or {})))
        self._maybe_fail("select", table)
        return [row for row in self.tables.get(table, []) if self._matches(row, filters or {})]


class MockBitjitaClient:
    """Mock bitjita client returning canned pages and API payloads."""

    def __init__(self, pages: Optional[Dict[str, str]] = None, inventories: Optional[Dict[str, Any]] = None):
        self.pages = pages or {}
        self.inventories = inventories or {}
        self.items: Any = []
        self.cargos: Any = []
        self.page_fetches: List[str] = []
        self.inventory_fetches: List[str] = []

    def fetch_claim_page(self, settlement_id: str) -> str:
        self.page_fetches.append(settlement_id)
        page = self.pages.get(settlement_id)
        if isinstance(page, Exception):
            raise page
        if page is None:
            raise FetchError("HTTP error! status: 404", status_code=404)
        return page

    def fetch_claim_inventories(self, settlement_id: str):
        self.inventory_fetches.append(settlement_id)
        data = self.inventories.get(settlement_id)
        if isinstance(data, Exception):
            raise data
        if data is None:
            raise FetchError("HTTP error! status: 500", status_code=500)
        return data

    def fetch_items(self):
        if isinstance(self.items, Exception):
            raise self.items
        return self.items

    def fetch_cargo(self):
        if isinstance(self.cargos, Exception):
            raise self.cargos
        return self.cargos


# ========== FIXTURE DATA ==========


def get_mock_inventory_payload() -> Dict[str, Any]:
    """Two buildings, three occupied slots and one empty slot."""
    return {
        "buildings": [
            {
                "entityId": "b1",
                "buildingName": "Storage Chest",
                "buildingNickname": "Main Storage",
                "buildingDescriptionId": 100,
                "iconAssetName": "Buildings/Chest",
                "inventory": [
                    {"contents": {"item_id": 1, "item_type": "item", "quantity": 5}},
                    {"contents": {"item_id": 2, "item_type": "item", "quantity": 2}},
                    {"contents": None},
                ],
            },
            {
                "entityId": "b2",
                "buildingName": "Cargo Stockpile",
                "buildingNickname": None,
                "buildingDescriptionId": 200,
                "inventory": [
                    {"contents": {"item_id": 1, "item_type": "cargo", "quantity": 3}},
                ],
            },
        ],
        "items": [
            {"id": 1, "name": "Wood", "tier": 1, "rarityStr": "Common", "iconAssetName": "Items/Wood"},
            {"id": 2, "name": "Wood Package", "tier": 1, "rarityStr": "Common", "iconAssetName": "Items/WoodPackage"},
        ],
        "cargos": [
            {"id": 1, "name": "Rough Wood Log", "tier": 1, "rarityStr": "Common", "iconAssetName": "Cargo/Log"},
        ],
    }


def get_mock_member_payload() -> Dict[str, Any]:
    return {
        "claim": {"name": "Port Taverna", "entityId": "144115188105096768"},
        "members": [
            {
                "entityId": "m1",
                "playerEntityId": "p1",
                "userName": "Alice",
                "inventoryPermission": 1,
                "buildPermission": 1,
                "officerPermission": 1,
                "coOwnerPermission": 1,
                "lastLoginTimestamp": "2024-06-01T11:30:00Z",
                "createdAt": "2024-01-01T00:00:00Z",
                "updatedAt": "2024-05-01T00:00:00Z",
            },
            {
                "entityId": "m2",
                "playerEntityId": "p2",
                "userName": "Bob",
                "inventoryPermission": 1,
                "buildPermission": 0,
                "officerPermission": 0,
                "coOwnerPermission": 0,
                "lastLoginTimestamp": "2024-05-30T08:00:00Z",
            },
        ],
        "memberCount": 2,
        "citizens": [
            {
                "entityId": "p1",
                "userName": "Alice",
                "skills": {"1": 20, "2": 15},
                "totalSkills": 2,
                "highestLevel": 20,
                "totalLevel": 35,
                "totalXP": 12345,
            },
            {
                "entityId": "p2",
                "userName": "Bob",
                "skills": {"1": 3},
                "totalSkills": 1,
                "highestLevel": 3,
                "totalLevel": 3,
                "totalXP": 99,
            },
        ],
        "citizenCount": 2,
        "skillNames": {"1": "Forestry", "2": "Carpentry"},
    }


def build_claim_page(inventory: Optional[Dict] = None, members: Optional[Dict] = None, session_id: str = SESSION_ID, extra_scripts: str = "") -> str:
    """
    Render a claim page the way bitjita embeds its hydration payloads.

    JSON is a subset of the JavaScript literal grammar, so payloads are
    serialized with json.dumps.
    """
    scripts = [f"<script>__sveltekit_{session_id} = {{ base: new URL('.', location).pathname.slice(0, -1) }};</script>"]
    if extra_scripts:
        scripts.append(extra_scripts)
    if inventory is not None:
        scripts.append(f"<script>__sveltekit_{session_id}.resolve({{id: 1, data: {json.dumps(inventory)}, error: void 0}});</script>")
    if members is not None:
        kit_data = {"node_ids": [0, 5], "data": [{"type": "data", "data": None}, {"type": "data", "data": members}]}
        scripts.append(f"<script>kit.start(app, element, {json.dumps(kit_data)});</script>")
    return "<html><head></head><body>" + "".join(scripts) + "</body></html>"


def make_response(status_code: int = 200, json_data: Any = None, text: str = "") -> Mock:
    """Build a mock requests.Response."""
    response = Mock(spec=requests.Response)
    response.status_code = status_code
    response.text = text
    if json_data is not None:
        response.json.return_value = json_data
    else:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(response=response)
    else:
        response.raise_for_status.return_value = None
    return response


# ========== PYTEST FIXTURES ==========


@pytest.fixture(autouse=True)
def isolate_user_directories(tmp_path, monkeypatch):
    """Keep config and cache lookups inside the test's temp directory."""
    monkeypatch.setenv("SETTLEMENT_SYNC_HOME", str(tmp_path / "home"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path / "cache"))


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def inventory_payload():
    return get_mock_inventory_payload()


@pytest.fixture
def member_payload():
    return get_mock_member_payload()


@pytest.fixture
def settlement_payload():
    """Inventory payload with member/citizen data merged in, as the extractor returns it."""
    payload = get_mock_inventory_payload()
    payload.update(get_mock_member_payload())
    return payload


@pytest.fixture
def claim_page():
    return build_claim_page(get_mock_inventory_payload(), get_mock_member_payload())


@pytest.fixture
def in_memory_store():
    return InMemoryStore()


@pytest.fixture
def mock_bitjita_client():
    return MockBitjitaClient()


@pytest.fixture
def mock_session():
    """A requests.Session mock with a real headers dict."""
    session = Mock(spec=requests.Session)
    session.headers = {}
    return session


@pytest.fixture
def sync_config(tmp_path):
    return SyncConfig(
        supabase_url="https://example.supabase.co",
        service_role_key="service-key",
        settlement_ids=["111"],
        snapshot_dir=str(tmp_path / "snapshots"),
    )
