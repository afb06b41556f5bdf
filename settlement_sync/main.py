import logging
import platform
import sys
import threading

from settlement_sync import __version__
from settlement_sync.client import BitjitaClient, SupabaseStore
from settlement_sync.core.config import load_config
from settlement_sync.core.errors import ConfigurationError
from settlement_sync.core.scheduler import ScrapeScheduler
from settlement_sync.core.sync_service import SyncService
from settlement_sync.services import PersistenceSyncService, SnapshotExportService

LOG_FILENAME = "settlement-sync.log"


def configure_logging(level: str = "INFO"):
    """Log to both console and file, replacing any existing configuration."""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(LOG_FILENAME, mode="w"),
        ],
        force=True,
    )


def log_system_environment():
    logging.info(f"=== Settlement Sync {__version__} Starting ===")
    logging.info(f"Python version: {sys.version}")
    logging.info(f"Operating System: {platform.system()} {platform.release()}")


def build_sync_service(config) -> SyncService:
    """Wire the clients and services described by the configuration."""
    bitjita_client = BitjitaClient(
        base_url=config.bitjita_base_url,
        timeout=config.request_timeout_seconds,
        user_agent=config.user_agent,
    )
    store = SupabaseStore(config.supabase_url, config.service_role_key, timeout=config.request_timeout_seconds)
    persistence = PersistenceSyncService(store, member_scope=config.member_scope)
    snapshot_service = SnapshotExportService(config.snapshot_dir)
    return SyncService(config, bitjita_client, persistence, snapshot_service)


def main() -> int:
    configure_logging()

    try:
        config = load_config()
    except ConfigurationError as e:
        logging.error(f"❌ {e}")
        return 1

    configure_logging(config.log_level)
    log_system_environment()
    logging.info(f"Settlements: {', '.join(config.settlement_ids)}")

    sync_service = build_sync_service(config)
    scheduler = ScrapeScheduler(
        sync_service.run_cycle,
        interval_seconds=config.scrape_interval_seconds,
        cooldown_seconds=config.manual_scrape_cooldown_seconds,
    )
    scheduler.start()

    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        logging.info("🛑 Shutting down scraper...")
    finally:
        scheduler.stop()

    return 0


if __name__ == "__main__":
    sys.exit(main())
