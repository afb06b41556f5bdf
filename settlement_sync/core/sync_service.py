"""
Scrape-and-sync orchestration.

One cycle, per configured settlement: run the inventory, member and skill
scrapes concurrently, replace the stored rows with the results, export a
snapshot and log a summary.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .errors import FetchError, SettlementSyncError
from .parsing import extract_settlement_data, summarize_payload
from .processors import InventoryProcessor, MembersProcessor, SkillsProcessor


class CyclePageCache:
    """
    Claim-page payloads fetched during one cycle.

    Concurrent callers asking for the same settlement wait for a single fetch;
    a failed fetch is remembered as None for the rest of the cycle.
    """

    def __init__(self, bitjita_client):
        self.bitjita_client = bitjita_client
        self._payloads: Dict[str, Optional[dict]] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, settlement_id: str) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(settlement_id, threading.Lock())

    def get_payload(self, settlement_id: str) -> Optional[dict]:
        with self._lock_for(settlement_id):
            if settlement_id in self._payloads:
                return self._payloads[settlement_id]

            payload = None
            try:
                html = self.bitjita_client.fetch_claim_page(settlement_id)
                payload = extract_settlement_data(html)
                if payload:
                    summary = summarize_payload(payload)
                    logging.info(
                        f"✓ Found settlement data: {summary['buildings']} buildings, "
                        f"{summary['items']} items, {summary['cargos']} cargos"
                    )
            except SettlementSyncError as e:
                logging.error(f"Error fetching claim page for {settlement_id}: {e}")

            self._payloads[settlement_id] = payload
            return payload

    def clear(self):
        with self._guard:
            self._payloads.clear()
            self._locks.clear()


@dataclass
class SettlementReport:
    settlement_id: str
    inventory_count: int = 0
    members_count: int = 0
    skills_count: int = 0
    sync_results: List = field(default_factory=list)
    snapshot_path: Optional[str] = None
    duration_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return all(result.success for result in self.sync_results)


@dataclass
class CycleReport:
    started_at: float
    settlements: List[SettlementReport] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return all(report.success for report in self.settlements)


class SyncService:
    """Runs scrape cycles for the configured settlements."""

    def __init__(self, config, bitjita_client, persistence, snapshot_service=None):
        """
        Args:
            config: SyncConfig
            bitjita_client: BitjitaClient (or compatible)
            persistence: PersistenceSyncService
            snapshot_service: SnapshotExportService, or None to skip snapshots
        """
        self.config = config
        self.bitjita_client = bitjita_client
        self.persistence = persistence
        self.snapshot_service = snapshot_service if config.snapshots_enabled else None
        self.page_cache = CyclePageCache(bitjita_client)

    def _api_inventory_payload(self, settlement_id: str) -> dict:
        data = self.bitjita_client.fetch_claim_inventories(settlement_id)
        if InventoryProcessor.get_buildings(data) is None:
            keys = list(data.keys()) if isinstance(data, dict) else type(data).__name__
            raise FetchError(f"Inventories API returned unexpected format: {keys}")

        if not data.get("items") and not data.get("cargos"):
            page_payload = self.page_cache.get_payload(settlement_id) or {}
            data = dict(data)
            data["items"] = page_payload.get("items") or []
            data["cargos"] = page_payload.get("cargos") or []
        return data

    def scrape_inventory(self, settlement_id: str) -> list:
        """Inventory records from the inventories API, falling back to the claim page."""
        processor = InventoryProcessor(settlement_id=settlement_id)
        try:
            try:
                return processor.process(self._api_inventory_payload(settlement_id))
            except SettlementSyncError as e:
                logging.warning(f"Inventory API failed for {settlement_id}, falling back to HTML scraping: {e}")

            payload = self.page_cache.get_payload(settlement_id)
            if not payload:
                logging.info("❌ No inventory data found")
                return []
            return processor.process(payload)
        except Exception as e:
            logging.error(f"Error scraping inventory data: {e}")
            return []

    def scrape_members(self, settlement_id: str) -> list:
        try:
            payload = self.page_cache.get_payload(settlement_id)
            if not payload:
                logging.info("❌ No member data found")
                return []
            return MembersProcessor(settlement_id=settlement_id).process(payload)
        except Exception as e:
            logging.error(f"Error scraping members data: {e}")
            return []

    def scrape_skills(self, settlement_id: str) -> list:
        try:
            payload = self.page_cache.get_payload(settlement_id)
            if not payload:
                logging.info("❌ No citizen/skill data found")
                return []
            return SkillsProcessor(settlement_id=settlement_id).process(payload)
        except Exception as e:
            logging.error(f"Error scraping skills data: {e}")
            return []

    def sync_settlement(self, settlement_id: str) -> SettlementReport:
        """Scrape, persist and export one settlement."""
        start = time.time()
        logging.info(f"🔄 Syncing settlement {settlement_id}")

        with ThreadPoolExecutor(max_workers=3, thread_name_prefix="Scrape") as executor:
            inventory_future = executor.submit(self.scrape_inventory, settlement_id)
            members_future = executor.submit(self.scrape_members, settlement_id)
            skills_future = executor.submit(self.scrape_skills, settlement_id)
            inventory = inventory_future.result()
            members = members_future.result()
            skills = skills_future.result()

        report = SettlementReport(
            settlement_id=settlement_id,
            inventory_count=len(inventory),
            members_count=len(members),
            skills_count=len(skills),
        )
        report.sync_results = self.persistence.sync_all(settlement_id, inventory, members, skills)

        if self.snapshot_service:
            report.snapshot_path = self.snapshot_service.export(settlement_id, inventory, members, skills)

        report.duration_seconds = time.time() - start
        logging.info(f"📦 Inventory items: {report.inventory_count}")
        logging.info(f"👥 Members: {report.members_count}")
        logging.info(f"⚡ Skills entries: {report.skills_count}")
        for result in report.sync_results:
            if not result.success:
                logging.warning(f"❌ {result.record_type} sync failed: {result.error}")
        return report

    def run_cycle(self) -> CycleReport:
        """Run one full scrape cycle over every configured settlement."""
        report = CycleReport(started_at=time.time())
        logging.info("🚀 Starting scrape cycle...")
        self.page_cache.clear()

        try:
            for settlement_id in self.config.settlement_ids:
                report.settlements.append(self.sync_settlement(settlement_id))
        finally:
            self.page_cache.clear()

        report.duration_seconds = time.time() - report.started_at
        status = "✅ Scrape cycle completed" if report.success else "❌ Scrape cycle completed with errors"
        logging.info(f"{status} in {report.duration_seconds:.1f}s")
        return report
