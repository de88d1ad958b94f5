"""Round-trip flight offer search with a local result cache."""

from .models import OfferSet, TripQuery
from .orchestrator import Phase, SearchOrchestrator, SearchState

__all__ = ["OfferSet", "TripQuery", "Phase", "SearchOrchestrator", "SearchState"]
