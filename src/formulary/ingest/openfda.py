"""Client for the openFDA drug-label endpoint."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from formulary.config import get_settings

logger = logging.getLogger(__name__)

BRAND_FILTER = "_exists_:openfda.brand_name"


class SourceUnavailable(RuntimeError):
    """Raised when the drug-label source is unreachable or returns an error response."""


class OpenFDAClient:
    """Thin wrapper around the openFDA label search that normalizes transport errors."""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = 30) -> None:
        settings = get_settings()
        self.base_url = base_url or settings.openfda_label_url
        self.timeout = timeout

    def _request(self, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = requests.get(self.base_url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise SourceUnavailable(f"openFDA request failed: {exc}") from exc
        if not response.ok:
            raise SourceUnavailable(f"openFDA error {response.status_code}: {response.text}")
        try:
            return response.json()
        except ValueError as exc:
            raise SourceUnavailable("openFDA returned a non-JSON body") from exc

    def fetch_labels(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Fetch raw label records that carry a known brand name."""
        limit = limit or get_settings().label_limit
        payload = self._request({"search": BRAND_FILTER, "limit": limit})
        results = payload.get("results") or []
        logger.info("Fetched %d label records from %s", len(results), self.base_url)
        return list(results)
