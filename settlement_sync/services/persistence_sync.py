"""
Persistence Sync Service

Replaces the stored inventory, member and skill rows of a settlement with the
records of the latest scrape. Each record type is synced independently:
delete the settlement's existing rows, then insert the new ones.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..core.errors import StoreError
from ..core.processors.base_processor import utc_now

INVENTORY_TABLE = "settlement_inventory"
MEMBERS_TABLE = "settlement_members"
SKILLS_TABLE = "settlement_skills"

# Matches every row; used when member/skill tables are treated as global
GLOBAL_DELETE_FILTER = {"id": "neq.00000000-0000-0000-0000-000000000000"}


@dataclass
class SyncResult:
    """Outcome of replacing one record type."""

    record_type: str
    success: bool
    count: int = 0
    error: Optional[str] = None
    skipped: bool = False


class PersistenceSyncService:
    """
    Delete-then-insert sync of normalized records into the settlement tables.

    There are no transactions: a failed delete aborts that type before
    insert, and a failed insert leaves the table empty for that settlement
    until the next cycle.
    """

    def __init__(self, store, member_scope: str = "settlement"):
        """
        Args:
            store: Table client exposing delete(table, filters) and insert(table, rows)
            member_scope: "settlement" scopes member/skill deletes to the synced
                settlement; "global" clears the whole table
        """
        self.store = store
        self.member_scope = member_scope

    def _settlement_filter(self, settlement_id: str) -> Dict[str, str]:
        return {"settlement_id": f"eq.{settlement_id}"}

    def _member_filter(self, settlement_id: str) -> Dict[str, str]:
        if self.member_scope == "global":
            return dict(GLOBAL_DELETE_FILTER)
        return self._settlement_filter(settlement_id)

    def _replace(self, record_type: str, table: str, delete_filter: Dict[str, str], rows: List[dict]) -> SyncResult:
        if not rows:
            logging.info(f"No {record_type} records to update")
            return SyncResult(record_type, success=True, count=0, skipped=True)

        try:
            self.store.delete(table, delete_filter)
        except StoreError as e:
            logging.error(f"Error clearing {record_type} data: {e}")
            return SyncResult(record_type, success=False, error=str(e))

        try:
            count = self.store.insert(table, rows)
        except StoreError as e:
            logging.error(f"Error inserting {record_type} data: {e}")
            return SyncResult(record_type, success=False, error=str(e))

        logging.info(f"Successfully updated {count} {record_type} records")
        return SyncResult(record_type, success=True, count=count)

    def replace_inventory(self, settlement_id: str, records) -> SyncResult:
        updated_at = utc_now().isoformat()
        rows = []
        for record in records:
            row = record.to_dict()
            row["settlement_id"] = settlement_id
            row["updated_at"] = updated_at
            rows.append(row)
        return self._replace("inventory", INVENTORY_TABLE, self._settlement_filter(settlement_id), rows)

    def replace_members(self, settlement_id: str, records) -> SyncResult:
        rows = []
        for record in records:
            row = record.to_row()
            row["settlement_id"] = settlement_id
            rows.append(row)
        return self._replace("member", MEMBERS_TABLE, self._member_filter(settlement_id), rows)

    def replace_skills(self, settlement_id: str, records) -> SyncResult:
        rows = []
        for record in records:
            row = record.to_dict()
            row["settlement_id"] = settlement_id
            rows.append(row)
        return self._replace("skill", SKILLS_TABLE, self._member_filter(settlement_id), rows)

    def sync_all(self, settlement_id: str, inventory, members, skills) -> List[SyncResult]:
        """
        Replace all three record types concurrently.

        Returns:
            SyncResults in the order inventory, members, skills
        """
        with ThreadPoolExecutor(max_workers=3, thread_name_prefix="PersistenceSync") as executor:
            futures = [
                executor.submit(self.replace_inventory, settlement_id, inventory),
                executor.submit(self.replace_members, settlement_id, members),
                executor.submit(self.replace_skills, settlement_id, skills),
            ]
            return [future.result() for future in futures]
