import logging
from typing import Optional

import requests

from ..core.config import DEFAULT_USER_AGENT
from ..core.errors import FetchError
from .response_shapes import CARGO_FEED_SHAPES, ITEM_FEED_SHAPES, unwrap_feed


class BitjitaClient:
    """HTTP client for the bitjita.com claim pages and JSON API."""

    DEFAULT_BASE_URL = "https://bitjita.com"

    def __init__(self, base_url: str = DEFAULT_BASE_URL, timeout: float = 30.0, user_agent: Optional[str] = None, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": user_agent or DEFAULT_USER_AGENT})

    def claim_page_url(self, settlement_id: str) -> str:
        return f"{self.base_url}/claims/{settlement_id}"

    def _get(self, path: str, accept: str) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, headers={"Accept": accept}, timeout=self.timeout)
            response.raise_for_status()
            return response
        except requests.exceptions.HTTPError as http_err:
            status = http_err.response.status_code if http_err.response is not None else None
            raise FetchError(f"HTTP error! status: {status}", url=url, status_code=status) from http_err
        except requests.exceptions.RequestException as req_err:
            raise FetchError(f"Request to {url} failed: {req_err}", url=url) from req_err

    def _get_json(self, path: str):
        response = self._get(path, "application/json")
        try:
            return response.json()
        except ValueError as e:
            raise FetchError(f"Invalid JSON from {path}: {e}", url=f"{self.base_url}{path}") from e

    def fetch_claim_page(self, settlement_id: str) -> str:
        """
        Fetch the HTML of a claim page.

        Args:
            settlement_id: Claim entity id

        Returns:
            The page HTML

        Raises:
            FetchError: On transport errors or non-2xx responses
        """
        logging.info(f"Fetching data from: {self.claim_page_url(settlement_id)}")
        return self._get(f"/claims/{settlement_id}", "text/html").text

    def fetch_claim_inventories(self, settlement_id: str):
        """Fetch the inventories JSON of a claim (buildings, items, cargos)."""
        logging.info(f"Fetching inventory data from API: {self.base_url}/api/claims/{settlement_id}/inventories")
        data = self._get_json(f"/api/claims/{settlement_id}/inventories")
        logging.info("✓ Successfully fetched inventory data from API")
        return data

    def fetch_items(self) -> list:
        """Fetch the item catalog, unwrapping whichever envelope the API uses."""
        items, _ = unwrap_feed(self._get_json("/api/items"), ITEM_FEED_SHAPES, "Items")
        logging.info(f"Fetched items: {len(items)}")
        return items

    def fetch_cargo(self) -> list:
        """Fetch the cargo catalog, unwrapping whichever envelope the API uses."""
        cargos, _ = unwrap_feed(self._get_json("/api/cargo"), CARGO_FEED_SHAPES, "Cargo")
        logging.info(f"Fetched cargos: {len(cargos)}")
        return cargos
