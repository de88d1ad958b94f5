"""Cache keys for search results.

A key is the six query fields joined by ``_`` in a fixed order::

    departure_return_origin_destination_adults_currency
    2025-06-01_2025-06-10_JFK_LAX_2_USD

Dates are ISO formatted and codes are IATA/ISO letters, so none of the
fields contains the delimiter.
"""

from __future__ import annotations

from .models import TripQuery

DELIMITER = "_"
FIELD_ORDER = (
    "departure_date",
    "return_date",
    "origin_code",
    "destination_code",
    "passenger_count",
    "currency_code",
)


def _as_text(value: object) -> str:
    isoformat = getattr(value, "isoformat", None)
    return isoformat() if isoformat else str(value)


def encode(query: TripQuery) -> str:
    """Return the cache key for *query*."""
    return DELIMITER.join(_as_text(getattr(query, name)) for name in FIELD_ORDER)


__all__ = ["DELIMITER", "FIELD_ORDER", "encode"]
