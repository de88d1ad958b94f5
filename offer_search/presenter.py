"""Plain-text rendering of search results."""

from __future__ import annotations

from typing import Any

from .orchestrator import Phase, SearchState

_LEG_LABELS = ("Outbound", "Return")


def _leg_label(index: int) -> str:
    return _LEG_LABELS[index] if index < len(_LEG_LABELS) else f"Leg {index + 1}"


def format_segment(segment: dict[str, Any], dictionaries: dict[str, Any]) -> str:
    dep = segment.get("departure") or {}
    arr = segment.get("arrival") or {}
    carrier = segment.get("carrierCode", "")
    carrier_name = (dictionaries.get("carriers") or {}).get(carrier, carrier)
    aircraft_code = (segment.get("aircraft") or {}).get("code")
    aircraft = (dictionaries.get("aircraft") or {}).get(aircraft_code, aircraft_code)

    line = (
        f"{dep.get('iataCode', '?')} {dep.get('at', '')} ➔ "
        f"{arr.get('iataCode', '?')} {arr.get('at', '')}  "
        f"{carrier}{segment.get('number', '')} {carrier_name}"
    )
    if aircraft:
        line += f" ({aircraft})"
    return line


def format_offer(offer: dict[str, Any], dictionaries: dict[str, Any]) -> str:
    """Render one provider offer record as an indented block."""
    price = offer.get("price") or {}
    total = price.get("grandTotal") or price.get("total", "?")
    lines = [f"Offer {offer.get('id', '?')} · {total} {price.get('currency', '')}".rstrip()]

    for index, itinerary in enumerate(offer.get("itineraries") or []):
        duration = itinerary.get("duration", "")
        lines.append(f"  {_leg_label(index)} {duration}".rstrip())
        for segment in itinerary.get("segments") or []:
            lines.append("    " + format_segment(segment, dictionaries))
    return "\n".join(lines)


def render_state(state: SearchState) -> str:
    """Return the text shown to the user for a terminal *state*."""
    if state.phase is Phase.INVALID:
        return str(state.error)
    if state.phase is Phase.ERROR:
        return f"Search failed: {state.error}"
    if state.phase is not Phase.DONE or state.offers is None:
        return f"Search {state.phase.value}"

    query = state.query
    offers = state.offers
    header = f"{offers.count} offers"
    if query is not None:
        header += (
            f" for {query.origin_code} ➔ {query.destination_code}"
            f" ({query.departure_date} – {query.return_date}),"
            f" {query.passenger_count} adult(s), {query.currency_code}"
        )
    if state.source == "cache":
        header += " [cached]"

    if not offers.offers:
        return f"{header}\nNo offers found"
    blocks = [format_offer(offer, offers.dictionaries) for offer in offers.offers]
    return "\n".join([header, *blocks])


__all__ = ["format_segment", "format_offer", "render_state"]
