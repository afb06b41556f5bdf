"""
Snapshot Export Service

Writes the records of each scrape cycle to timestamped JSON files, plus a
``latest-settlement-data.json`` that is overwritten every cycle.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional

from ..core.data_paths import ensure_directory
from ..core.processors.base_processor import utc_now

LATEST_FILENAME = "latest-settlement-data.json"


def _js_iso(moment) -> str:
    """ISO timestamp with millisecond precision and a Z suffix."""
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def file_timestamp(iso_timestamp: str) -> str:
    return iso_timestamp.replace(":", "-").replace(".", "-")


def _to_dicts(records) -> List[dict]:
    return [record.to_dict() if hasattr(record, "to_dict") else record for record in records]


class SnapshotExportService:
    """Exports cycle results to the snapshot directory."""

    def __init__(self, snapshot_dir: str = "scraped-data", clock=None):
        self.snapshot_dir = Path(snapshot_dir)
        self.clock = clock or utc_now

    def _write_json(self, path: Path, payload):
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)

    def export(self, settlement_id: str, inventory, members, skills) -> Optional[str]:
        """
        Write the snapshot files for one settlement.

        Args:
            settlement_id: Settlement the records belong to
            inventory: Inventory records (dataclasses or dicts)
            members: Member records
            skills: Skill records

        Returns:
            The snapshot directory path, or None if writing failed
        """
        try:
            if not ensure_directory(self.snapshot_dir):
                return None

            timestamp = _js_iso(self.clock())
            stamp = file_timestamp(timestamp)

            inventory_data = _to_dicts(inventory)
            members_data = _to_dicts(members)
            skills_data = _to_dicts(skills)

            export_data = {
                "timestamp": timestamp,
                "settlementId": settlement_id,
                "inventory": inventory_data,
                "members": members_data,
                "skills": skills_data,
                "summary": {
                    "inventoryCount": len(inventory_data),
                    "membersCount": len(members_data),
                    "skillsCount": len(skills_data),
                },
            }

            self._write_json(self.snapshot_dir / f"bitjita-settlement-{stamp}.json", export_data)

            for name, data in (("inventory", inventory_data), ("members", members_data), ("skills", skills_data)):
                if data:
                    self._write_json(self.snapshot_dir / f"{name}-{stamp}.json", {"timestamp": timestamp, "data": data})

            self._write_json(self.snapshot_dir / LATEST_FILENAME, export_data)

            logging.info(f"📁 Data exported to JSON files in: {self.snapshot_dir}")
            logging.info(f"   - Complete data: bitjita-settlement-{stamp}.json")
            logging.info(f"   - Latest data: {LATEST_FILENAME}")
            return str(self.snapshot_dir)

        except (OSError, TypeError, ValueError) as e:
            logging.error(f"Error exporting data to JSON: {e}")
            return None
