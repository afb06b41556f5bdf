"""
Client for the hosted settlement database.

Talks to the database's PostgREST interface (``/rest/v1/<table>``) with the
service-role credential. Only the three operations the sync needs are
implemented: filtered delete, batched insert and select.
"""

import logging
from typing import Dict, Iterable, List, Optional

import requests

from ..core.errors import StoreError


class SupabaseStore:
    """Minimal table client for the settlement database."""

    DEFAULT_BATCH_SIZE = 500

    def __init__(self, url: str, service_key: str, timeout: float = 30.0, session: Optional[requests.Session] = None):
        self.rest_url = f"{url.rstrip('/')}/rest/v1"
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "apikey": service_key,
                "Authorization": f"Bearer {service_key}",
                "Content-Type": "application/json",
            }
        )

    def _request(self, method: str, table: str, operation: str, **kwargs) -> requests.Response:
        url = f"{self.rest_url}/{table}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            raise StoreError(f"{operation} on {table} failed: {e}", table=table, operation=operation) from e

        if response.status_code >= 400:
            raise StoreError(
                f"{operation} on {table} failed with status {response.status_code}: {response.text[:200]}",
                table=table,
                operation=operation,
                status_code=response.status_code,
            )
        return response

    def delete(self, table: str, filters: Dict[str, str]) -> None:
        """
        Delete rows matching every filter.

        Args:
            table: Table name
            filters: Column -> PostgREST operator expression, e.g. {"settlement_id": "eq.123"}

        Raises:
            StoreError: If no filter is given or the request fails
        """
        if not filters:
            raise StoreError(f"Refusing unfiltered delete on {table}", table=table, operation="delete")
        self._request("DELETE", table, "delete", params=dict(filters), headers={"Prefer": "return=minimal"})

    def insert(self, table: str, rows: Iterable[dict], batch_size: int = DEFAULT_BATCH_SIZE) -> int:
        """
        Bulk insert rows in batches.

        Returns:
            Number of rows sent
        """
        rows = list(rows)
        for start in range(0, len(rows), batch_size):
            batch = rows[start : start + batch_size]
            self._request("POST", table, "insert", json=batch, headers={"Prefer": "return=minimal"})
            logging.debug(f"Inserted batch of {len(batch)} rows into {table}")
        return len(rows)

    def select(self, table: str, filters: Optional[Dict[str, str]] = None, order: Optional[str] = None) -> List[dict]:
        """Select rows; ``order`` uses PostgREST syntax such as 'location.asc,item_name.asc'."""
        params = {"select": "*"}
        params.update(filters or {})
        if order:
            params["order"] = order
        response = self._request("GET", table, "select", params=params)
        try:
            return response.json()
        except ValueError as e:
            raise StoreError(f"select on {table} returned invalid JSON: {e}", table=table, operation="select") from e
