"""
Page-script extractor for bitjita claim pages.

Locates the SvelteKit hydration calls embedded in a claim page and recovers
the settlement payload from them:

* ``__sveltekit_<id>.resolve({...})`` carries buildings, items and cargos.
* ``kit.start(app, element, {...})`` carries claim, member and citizen data.

Parsing is best-effort: a malformed candidate is logged and skipped, and a
missing member payload still returns the inventory data.
"""

import logging
import re
from typing import Any, Dict, Optional

from ..errors import PayloadParseError
from .literal_parser import parse_literal

_RESOLVE_CALL = re.compile(r"__sveltekit_[A-Za-z0-9_$]+\.resolve\(\s*(?=\{)")
_KIT_START_CALL = re.compile(r"kit\.start\(\s*app\s*,\s*element\s*,\s*(?=\{)")
_SESSION_ID = re.compile(r"__sveltekit_([A-Za-z0-9_$]+)")

INVENTORY_KEYS = ("buildings", "items", "cargos")
MEMBER_KEYS = ("claim", "members", "memberCount", "citizens", "citizenCount", "skillNames")


def find_session_id(html: str) -> Optional[str]:
    """Return the randomized SvelteKit session token embedded in the page."""
    match = _SESSION_ID.search(html or "")
    return match.group(1) if match else None


def summarize_payload(settlement_data: Dict) -> Dict[str, int]:
    """Count buildings, catalog entries and occupied slots for diagnostics."""
    buildings = settlement_data.get("buildings") or []
    total_slots = 0
    slots_with_contents = 0
    for building in buildings:
        inventory = building.get("inventory") if isinstance(building, dict) else None
        if isinstance(inventory, list):
            total_slots += len(inventory)
            slots_with_contents += sum(1 for slot in inventory if isinstance(slot, dict) and slot.get("contents"))

    return {
        "buildings": len(buildings),
        "items": len(settlement_data.get("items") or []),
        "cargos": len(settlement_data.get("cargos") or []),
        "total_slots": total_slots,
        "slots_with_contents": slots_with_contents,
    }


def _is_inventory_payload(candidate: Any) -> bool:
    if not isinstance(candidate, dict):
        return False
    data = candidate.get("data")
    return isinstance(data, dict) and all(data.get(key) is not None for key in INVENTORY_KEYS)


def _find_inventory_payload(html: str, session_id: Optional[str]) -> Optional[Dict]:
    for match in _RESOLVE_CALL.finditer(html):
        try:
            logging.debug("📝 Found __sveltekit_*.resolve call, parsing...")
            candidate, _ = parse_literal(html, match.end(), session_id)
        except PayloadParseError as e:
            logging.info(f"Script content not parsable as object literal: {e}")
            continue

        if _is_inventory_payload(candidate):
            settlement_data = candidate["data"]
            summary = summarize_payload(settlement_data)
            logging.info("✓ Found inventory data in __sveltekit_*.resolve call")
            logging.info(f"- Buildings: {summary['buildings']}")
            logging.info(f"- Items: {summary['items']}")
            logging.info(f"- Cargos: {summary['cargos']}")
            logging.info(f"- Total inventory slots: {summary['total_slots']}")
            logging.info(f"- Slots with contents: {summary['slots_with_contents']}")
            return settlement_data

    return None


def _merge_member_payload(html: str, session_id: Optional[str], settlement_data: Dict) -> bool:
    for match in _KIT_START_CALL.finditer(html):
        try:
            kit_data, _ = parse_literal(html, match.end(), session_id)
        except PayloadParseError as e:
            logging.info(f"kit.start parsing failed (continuing in inventory-only mode): {e}")
            continue

        nodes = kit_data.get("data") if isinstance(kit_data, dict) else None
        if not isinstance(nodes, list) or len(nodes) < 2:
            continue
        page_node = nodes[1]
        page_data = page_node.get("data") if isinstance(page_node, dict) else None
        if not isinstance(page_data, dict):
            continue

        for key in MEMBER_KEYS:
            settlement_data[key] = page_data.get(key)

        claim = settlement_data.get("claim") or {}
        logging.info("✓ Successfully merged member/citizen data")
        logging.info(f"- Claim: {claim.get('name', 'Unknown') if isinstance(claim, dict) else 'Unknown'}")
        logging.info(f"- Members: {len(settlement_data.get('members') or [])}")
        logging.info(f"- Citizens: {len(settlement_data.get('citizens') or [])}")
        return True

    return False


def extract_settlement_data(html: str) -> Optional[Dict]:
    """
    Extract the merged settlement payload from a claim page.

    Args:
        html: Raw HTML of https://bitjita.com/claims/<id>

    Returns:
        The inventory payload (buildings, items, cargos) with claim, members,
        citizens and skillNames merged in when available, or None if no
        inventory payload was found.
    """
    if not html:
        logging.info("❌ No settlement data found in any script")
        return None

    logging.info("🔍 Searching for settlement data in scripts...")
    session_id = find_session_id(html)

    settlement_data = _find_inventory_payload(html, session_id)
    if settlement_data is None:
        logging.info("❌ No settlement data found in any script")
        return None

    logging.info("🔍 Looking for member/citizen data in kit.start...")
    if not _merge_member_payload(html, session_id, settlement_data):
        logging.warning("No member/citizen payload found - returning inventory data only")

    return settlement_data
