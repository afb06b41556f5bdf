"""
Members processor for converting claim members into role-flagged records.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from ...models import SettlementMemberRecord
from .base_processor import BaseProcessor

ONLINE_WINDOW = timedelta(hours=1)

# Epoch values above this are milliseconds, below it seconds
_EPOCH_MS_THRESHOLD = 10**11


def derive_role(storage: bool, build: bool, officer: bool, co_owner: bool) -> str:
    """
    Derive the single display role from the four permission flags.

    Precedence: co-owner > officer > builder > member > guest.
    """
    if co_owner:
        return "co-owner"
    if officer:
        return "officer"
    if build:
        return "builder"
    if storage:
        return "member"
    return "guest"


def parse_timestamp(value) -> Optional[datetime]:
    """Parse an ISO-8601 string or epoch number into an aware UTC datetime."""
    if value is None or value == "" or isinstance(value, bool):
        return None

    try:
        if isinstance(value, (int, float)):
            seconds = value / 1000.0 if value > _EPOCH_MS_THRESHOLD else float(value)
            return datetime.fromtimestamp(seconds, tz=timezone.utc)

        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    except (ValueError, OverflowError, OSError):
        logging.debug(f"Unparseable timestamp: {value!r}")
        return None


def is_member_online(last_login, now: datetime) -> bool:
    """A member is online if they logged in within the last hour (inclusive)."""
    login_time = parse_timestamp(last_login)
    if login_time is None:
        return False
    return now - login_time <= ONLINE_WINDOW


def _has_permission(value) -> bool:
    if isinstance(value, bool):
        return value
    return value == 1


class MembersProcessor(BaseProcessor):
    """Converts the page's members[] into SettlementMemberRecord objects."""

    def get_record_type(self):
        return "member"

    def process(self, settlement_data):
        members = settlement_data.get("members") if isinstance(settlement_data, dict) else None
        if not members:
            logging.info("❌ No member data found")
            return []

        logging.info(f"Processing {len(members)} members...")
        now = self.clock()
        timestamp = now.isoformat()

        records = []
        for member in members:
            if not isinstance(member, dict):
                continue

            storage = _has_permission(member.get("inventoryPermission"))
            build = _has_permission(member.get("buildPermission"))
            officer = _has_permission(member.get("officerPermission"))
            co_owner = _has_permission(member.get("coOwnerPermission"))
            last_login = member.get("lastLoginTimestamp") or None
            is_online = is_member_online(last_login, now)

            records.append(
                SettlementMemberRecord(
                    id=member.get("entityId"),
                    player_id=member.get("playerEntityId"),
                    player=member.get("userName"),
                    storage=storage,
                    build=build,
                    officer=officer,
                    co_owner=co_owner,
                    role=derive_role(storage, build, officer, co_owner),
                    is_online=is_online,
                    last_login=last_login,
                    last_seen=timestamp if is_online else last_login,
                    created_at=member.get("createdAt"),
                    updated_at=member.get("updatedAt"),
                    settlement_id=self.settlement_id,
                    timestamp=timestamp,
                )
            )

        self._log_result(records)
        return records
