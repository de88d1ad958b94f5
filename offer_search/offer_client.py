from __future__ import annotations

import asyncio
import logging
from typing import Optional

import requests

from .models import OfferSet, TripQuery

logger = logging.getLogger(__name__)


class NetworkError(RuntimeError):
    """Offer provider request failed or returned an unusable body."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class OfferSearchClient:
    """
    Client for the flight-offer provider endpoint.

    One POST per search, no retries. ``timeout`` is ``None`` unless the
    caller asks for one.
    """

    def __init__(
        self,
        endpoint: str = "http://localhost:5133",
        timeout: Optional[float] = None,
    ) -> None:
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout

    # ──────────────────────────────────────────────────────────

    def search(self, query: TripQuery) -> OfferSet:
        """Return the offers for *query* or raise :class:`NetworkError`."""
        payload = query.to_payload()
        logger.info(
            "Requesting offers %s ➔ %s (%s – %s)",
            query.origin_code,
            query.destination_code,
            query.departure_date,
            query.return_date,
        )

        try:
            resp = requests.post(
                self.endpoint,
                json=payload,
                timeout=self.timeout,
                headers={"Accept": "application/json"},
            )
        except requests.RequestException as exc:
            raise NetworkError(f"Request to {self.endpoint} failed: {exc}") from exc

        if not 200 <= resp.status_code < 300:
            raise NetworkError(
                f"HTTP {resp.status_code} – {resp.text[:120]}",
                status_code=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError as exc:
            raise NetworkError(
                f"Response is not valid JSON: {exc}", status_code=resp.status_code
            ) from exc

        try:
            return OfferSet.from_payload(data)
        except ValueError as exc:
            raise NetworkError(
                f"Unexpected response shape: {exc}", status_code=resp.status_code
            ) from exc

    async def asearch(self, query: TripQuery) -> OfferSet:
        """Run :meth:`search` in a worker thread."""
        return await asyncio.to_thread(self.search, query)


__all__ = ["NetworkError", "OfferSearchClient"]
