from __future__ import annotations

import datetime as dt
from typing import Mapping

from .models import TripQuery

# Form field names, identical to the provider's request keys.
FIELDS = (
    "departureDate",
    "returnDate",
    "originLocationCode",
    "destinationLocationCode",
    "adults",
    "currencyCode",
)


class ValidationError(ValueError):
    """Search parameters rejected before any request is made."""


class MissingFieldError(ValidationError):
    def __init__(self, missing: list[str]) -> None:
        super().__init__(f"Missing required fields: {', '.join(missing)}")
        self.missing = missing


class InvalidFieldError(ValidationError):
    def __init__(self, name: str, value: str, reason: str) -> None:
        super().__init__(f"Invalid {name} {value!r}: {reason}")
        self.name = name
        self.value = value


class SameAirportError(ValidationError):
    def __init__(self, code: str) -> None:
        super().__init__("Departure and Return Airport cannot be the same")
        self.code = code


class InvalidDateRangeError(ValidationError):
    def __init__(self, departure: dt.date, return_: dt.date) -> None:
        super().__init__(
            f"End date cannot be before start date ({return_} < {departure})"
        )
        self.departure = departure
        self.return_date = return_


def _parse_date(name: str, raw: str) -> dt.date:
    try:
        return dt.date.fromisoformat(raw)
    except ValueError as exc:
        raise InvalidFieldError(name, raw, "expected YYYY-MM-DD") from exc


def _parse_adults(raw: str) -> int:
    try:
        adults = int(raw)
    except ValueError as exc:
        raise InvalidFieldError("adults", raw, "expected an integer") from exc
    if adults < 1:
        raise InvalidFieldError("adults", raw, "must be at least 1")
    return adults


def parse_trip_query(fields: Mapping[str, str | None]) -> TripQuery:
    """Validate raw form *fields* and return a :class:`TripQuery`.

    Checks run in a fixed order: presence, distinct airports, date range,
    passenger count. The first failure is raised as a ``ValidationError``.
    """
    values = {name: (fields.get(name) or "").strip() for name in FIELDS}

    missing = [name for name in FIELDS if not values[name]]
    if missing:
        raise MissingFieldError(missing)

    origin = values["originLocationCode"].upper()
    destination = values["destinationLocationCode"].upper()
    if origin == destination:
        raise SameAirportError(origin)

    departure = _parse_date("departureDate", values["departureDate"])
    return_date = _parse_date("returnDate", values["returnDate"])
    if return_date < departure:
        raise InvalidDateRangeError(departure, return_date)

    return TripQuery(
        departure_date=departure,
        return_date=return_date,
        origin_code=origin,
        destination_code=destination,
        passenger_count=_parse_adults(values["adults"]),
        currency_code=values["currencyCode"].upper(),
    )


__all__ = [
    "FIELDS",
    "ValidationError",
    "MissingFieldError",
    "InvalidFieldError",
    "SameAirportError",
    "InvalidDateRangeError",
    "parse_trip_query",
]
