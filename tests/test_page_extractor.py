"""
Tests for extracting settlement payloads from bitjita claim pages.
"""

import json

from settlement_sync.core.parsing import extract_settlement_data, find_session_id, summarize_payload
from tests.conftest import SESSION_ID, build_claim_page, get_mock_inventory_payload, get_mock_member_payload


class TestExtractSettlementData:
    """Test resolve/kit.start candidate scanning."""

    def test_empty_html_returns_none(self):
        assert extract_settlement_data("") is None
        assert extract_settlement_data(None) is None

    def test_page_without_candidates_returns_none(self):
        assert extract_settlement_data("<html><body><script>console.log('hi')</script></body></html>") is None

    def test_inventory_and_member_payloads_are_merged(self, claim_page):
        data = extract_settlement_data(claim_page)

        assert data is not None
        assert len(data["buildings"]) == 2
        assert len(data["items"]) == 2
        assert len(data["cargos"]) == 1
        assert data["claim"]["name"] == "Port Taverna"
        assert len(data["members"]) == 2
        assert data["memberCount"] == 2
        assert len(data["citizens"]) == 2
        assert data["skillNames"] == {"1": "Forestry", "2": "Carpentry"}

    def test_inventory_only_when_kit_start_missing(self):
        data = extract_settlement_data(build_claim_page(get_mock_inventory_payload()))

        assert data is not None
        assert len(data["buildings"]) == 2
        assert "members" not in data

    def test_member_payload_ignored_without_inventory(self):
        assert extract_settlement_data(build_claim_page(None, get_mock_member_payload())) is None

    def test_malformed_candidate_skipped_for_valid_one(self):
        malformed = f"<script>__sveltekit_{SESSION_ID}.resolve({{id: 1, data: {{buildings: [oops(]}}}});</script>"
        page = build_claim_page(get_mock_inventory_payload(), extra_scripts=malformed)

        data = extract_settlement_data(page)

        assert data is not None
        assert len(data["buildings"]) == 2

    def test_non_inventory_resolve_candidate_skipped(self):
        other = f"<script>__sveltekit_{SESSION_ID}.resolve({{id: 2, data: {{leaderboard: []}}}});</script>"
        page = build_claim_page(get_mock_inventory_payload(), extra_scripts=other)

        data = extract_settlement_data(page)

        assert data is not None
        assert "leaderboard" not in data

    def test_malformed_kit_start_keeps_inventory(self):
        broken_kit = "<script>kit.start(app, element, {data: [null, {data: {members: [}}]});</script>"
        page = build_claim_page(get_mock_inventory_payload(), extra_scripts="") + broken_kit

        data = extract_settlement_data(page)

        assert data is not None
        assert "members" not in data

    def test_deferred_values_become_placeholders(self):
        members = get_mock_member_payload()
        kit = (
            "<script>kit.start(app, element, {node_ids: [0, 5], data: [null, {type: 'data', data: "
            f"{{claim: {json.dumps(members['claim'])}, members: __sveltekit_{SESSION_ID}.defer(1)}}}}]}});</script>"
        )
        page = build_claim_page(get_mock_inventory_payload()) + kit

        data = extract_settlement_data(page)

        assert data["members"] == "__DEFERRED_1__"
        assert data["citizens"] is None


class TestHelpers:
    def test_find_session_id(self, claim_page):
        assert find_session_id(claim_page) == SESSION_ID
        assert find_session_id("<html></html>") is None

    def test_summarize_payload(self):
        summary = summarize_payload(get_mock_inventory_payload())

        assert summary == {"buildings": 2, "items": 2, "cargos": 1, "total_slots": 4, "slots_with_contents": 3}
