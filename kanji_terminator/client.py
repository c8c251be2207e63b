"""HTTP client for the conversion server."""

from __future__ import annotations

import logging
import os
from typing import List, Optional, Sequence

import requests


LOGGER = logging.getLogger(__name__)

DEFAULT_API_URL = os.getenv("KANJI_TERMINATOR_API", "http://localhost:2024/")


class TransportError(Exception):
    """Raised when a reading request does not produce a usable response."""


class ReadingClient:
    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self, keys: Sequence[str]) -> List[str]:
        """Return one reading per key, in request order."""

        if not keys:
            return []
        try:
            response = self.session.post(self.base_url, json={"texts": list(keys)}, timeout=self.timeout)
        except requests.RequestException as exc:
            raise TransportError(f"Request failed: {exc}") from exc

        if not response.ok:
            raise TransportError(f"Server answered {response.status_code}: {response.text[:200]}")
        try:
            payload = response.json()
        except ValueError as exc:
            raise TransportError("Response is not JSON") from exc

        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, str):
            raise TransportError("Response has no data field")
        return data.split("\n")

    __call__ = fetch

    def close(self) -> None:
        self.session.close()
