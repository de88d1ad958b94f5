"""Data models used throughout the project."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any


@dataclass(frozen=True, slots=True)
class TripQuery:
    departure_date: date
    return_date: date
    origin_code: str
    destination_code: str
    passenger_count: int
    currency_code: str

    def to_payload(self) -> dict[str, Any]:
        """Return the request body expected by the offer provider."""
        return {
            "departureDate": self.departure_date.isoformat(),
            "returnDate": self.return_date.isoformat(),
            "originLocationCode": self.origin_code,
            "destinationLocationCode": self.destination_code,
            "adults": self.passenger_count,
            "currencyCode": self.currency_code,
        }


@dataclass(frozen=True, slots=True)
class OfferSet:
    """Offers returned by the provider for one search.

    ``offers`` keeps the provider's records untouched; only the presenter
    looks inside them.
    """

    count: int
    offers: tuple[dict[str, Any], ...] = ()
    dictionaries: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Any) -> "OfferSet":
        """Build an ``OfferSet`` from a decoded provider response.

        Raises ``ValueError`` when *payload* is not shaped like one.
        """
        if not isinstance(payload, dict):
            raise ValueError("offer payload must be a JSON object")

        data = payload.get("data", [])
        if not isinstance(data, list):
            raise ValueError("'data' must be a list")
        if not all(isinstance(item, dict) for item in data):
            raise ValueError("every 'data' record must be an object")

        dictionaries = payload.get("dictionaries") or {}
        if not isinstance(dictionaries, dict):
            raise ValueError("'dictionaries' must be an object")
        for name, lookup in dictionaries.items():
            if not isinstance(lookup, dict):
                raise ValueError(f"dictionary {name!r} must be an object")

        meta = payload.get("meta") or {}
        count = meta.get("count", len(data)) if isinstance(meta, dict) else len(data)
        try:
            count = int(count)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"invalid meta.count: {count!r}") from exc

        return cls(count=count, offers=tuple(data), dictionaries=dictionaries)

    def to_payload(self) -> dict[str, Any]:
        return {
            "meta": {"count": self.count},
            "data": list(self.offers),
            "dictionaries": self.dictionaries,
        }


__all__ = ["TripQuery", "OfferSet"]
