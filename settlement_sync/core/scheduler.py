"""
Polling scheduler for scrape cycles.

A single background thread runs a cycle immediately and then once per
interval. A non-blocking lock guarantees at most one cycle runs at a time,
whether started by the timer or by a manual request.
"""

import logging
import threading
import time
from datetime import datetime, timezone
from typing import Callable, Dict, Optional


class ScrapeScheduler:
    """Runs ``run_cycle`` on a fixed interval until stopped."""

    def __init__(self, run_cycle: Callable[[], object], interval_seconds: float = 60, cooldown_seconds: float = 300, time_func: Callable[[], float] = time.time):
        """
        Args:
            run_cycle: Callable performing one scrape cycle
            interval_seconds: Delay between scheduled cycles
            cooldown_seconds: Minimum delay between manual scrape requests
            time_func: Returns the current epoch seconds; injectable for tests
        """
        self.run_cycle = run_cycle
        self.interval_seconds = interval_seconds
        self.cooldown_seconds = cooldown_seconds
        self.time_func = time_func

        self.stop_event = threading.Event()
        self._cycle_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None

        self.last_scrape: Optional[float] = None
        self._last_manual_scrape: Optional[float] = None

    def start(self) -> bool:
        """
        Start the polling thread.

        Returns:
            False if the scheduler is already running
        """
        if self.is_running():
            logging.warning("Scrape scheduler is already running")
            return False

        self.stop_event.clear()
        self._thread = threading.Thread(target=self._loop, daemon=True, name="ScrapeScheduler")
        self._thread.start()
        logging.info(f"Scrape scheduler started - running every {self.interval_seconds:g} seconds")
        return True

    def stop(self, timeout: float = 10.0):
        """Signal the polling thread to stop and wait for it."""
        self.stop_event.set()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logging.warning("Scrape scheduler thread did not stop within timeout")
            else:
                logging.info("Scrape scheduler stopped")
        self._thread = None

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _loop(self):
        try:
            self.run_once()
            while not self.stop_event.wait(timeout=self.interval_seconds):
                self.run_once()
        finally:
            logging.info("Scrape scheduler loop ended")

    def run_once(self) -> bool:
        """
        Run one cycle unless another is in progress.

        Returns:
            True if a cycle ran, False if it was skipped
        """
        if not self._cycle_lock.acquire(blocking=False):
            logging.info("Scrape cycle already in progress - skipping")
            return False

        try:
            self.run_cycle()
        except Exception as e:
            logging.error(f"Error in scrape cycle: {e}")
        finally:
            self.last_scrape = self.time_func()
            self._cycle_lock.release()
        return True

    def cooldown_remaining(self) -> float:
        if self._last_manual_scrape is None:
            return 0.0
        return max(0.0, self.cooldown_seconds - (self.time_func() - self._last_manual_scrape))

    def request_scrape(self, force: bool = False) -> Dict:
        """
        Run a cycle now, outside the schedule.

        Args:
            force: Ignore the manual cooldown

        Returns:
            Dict with success, message and cooldown_remaining (seconds)
        """
        remaining = self.cooldown_remaining()
        if remaining > 0 and not force:
            return {
                "success": False,
                "message": f"Please wait {int(remaining // 60)} minutes and {int(remaining % 60)} seconds before scraping again",
                "cooldown_remaining": remaining,
            }

        if not self.run_once():
            return {"success": False, "message": "A scrape is already in progress", "cooldown_remaining": self.cooldown_remaining()}

        self._last_manual_scrape = self.time_func()
        return {"success": True, "message": "Scrape completed", "cooldown_remaining": self.cooldown_remaining()}

    def get_status(self) -> Dict:
        remaining = self.cooldown_remaining()
        last_scrape = datetime.fromtimestamp(self.last_scrape, tz=timezone.utc).isoformat() if self.last_scrape is not None else None
        return {
            "last_scrape": last_scrape,
            "can_scrape": remaining <= 0,
            "cooldown_remaining": remaining,
            "is_running": self.is_running(),
            "cycle_in_progress": self._cycle_lock.locked(),
        }
