"""Search lifecycle: validate, look up the cache, fetch on a miss, store.

Every submission walks a small state machine::

    IDLE → VALIDATING → INVALID
                      → CACHE_LOOKUP → DONE (cache)
                                     → FETCHING → CACHE_WRITE → DONE (network)
                                                → ERROR
                                                → SUPERSEDED

``transition`` is a pure function over :class:`SearchState` values, so the
whole flow can be checked without a network or a store.
:class:`SearchOrchestrator` drives it with a real cache and client.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Awaitable, Callable, Mapping, Optional, Protocol

from .cache_key import encode
from .models import OfferSet, TripQuery
from .offer_client import NetworkError
from .validation import ValidationError, parse_trip_query

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    INVALID = "invalid"
    CACHE_LOOKUP = "cache_lookup"
    FETCHING = "fetching"
    CACHE_WRITE = "cache_write"
    DONE = "done"
    ERROR = "error"
    SUPERSEDED = "superseded"


TERMINAL_PHASES = frozenset(
    {Phase.INVALID, Phase.DONE, Phase.ERROR, Phase.SUPERSEDED}
)


@dataclass(frozen=True, slots=True)
class SearchState:
    phase: Phase = Phase.IDLE
    seq: int = 0
    query: Optional[TripQuery] = None
    key: Optional[str] = None
    offers: Optional[OfferSet] = None
    error: Optional[Exception] = None
    source: Optional[str] = None

    @property
    def terminal(self) -> bool:
        return self.phase in TERMINAL_PHASES


# ────────────────────────────────────────────────────────────────
# Events
# ────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class Submitted:
    seq: int


@dataclass(frozen=True, slots=True)
class QueryAccepted:
    query: TripQuery
    key: str


@dataclass(frozen=True, slots=True)
class QueryRejected:
    error: ValidationError


@dataclass(frozen=True, slots=True)
class CacheHit:
    offers: OfferSet


@dataclass(frozen=True, slots=True)
class CacheMissed:
    pass


@dataclass(frozen=True, slots=True)
class FetchSucceeded:
    offers: OfferSet


@dataclass(frozen=True, slots=True)
class FetchFailed:
    error: NetworkError


@dataclass(frozen=True, slots=True)
class CacheWritten:
    stored: bool


@dataclass(frozen=True, slots=True)
class Superseded:
    pass


class InvalidTransition(RuntimeError):
    """Event is not accepted in the current phase."""


def transition(state: SearchState, event: object) -> SearchState:
    """Return the state that follows *state* after *event*."""
    phase = state.phase

    if phase is Phase.IDLE and isinstance(event, Submitted):
        return SearchState(phase=Phase.VALIDATING, seq=event.seq)

    if phase is Phase.VALIDATING:
        if isinstance(event, QueryRejected):
            return replace(state, phase=Phase.INVALID, error=event.error)
        if isinstance(event, QueryAccepted):
            return replace(
                state, phase=Phase.CACHE_LOOKUP, query=event.query, key=event.key
            )

    if phase is Phase.CACHE_LOOKUP:
        if isinstance(event, CacheHit):
            return replace(
                state, phase=Phase.DONE, offers=event.offers, source="cache"
            )
        if isinstance(event, CacheMissed):
            return replace(state, phase=Phase.FETCHING)

    if phase is Phase.FETCHING:
        if isinstance(event, FetchSucceeded):
            return replace(state, phase=Phase.CACHE_WRITE, offers=event.offers)
        if isinstance(event, FetchFailed):
            return replace(state, phase=Phase.ERROR, error=event.error)
        if isinstance(event, Superseded):
            return replace(state, phase=Phase.SUPERSEDED)

    # The outcome of the write does not change the result.
    if phase is Phase.CACHE_WRITE and isinstance(event, CacheWritten):
        return replace(state, phase=Phase.DONE, source="network")

    raise InvalidTransition(
        f"{type(event).__name__} is not allowed in phase {phase.value}"
    )


# ────────────────────────────────────────────────────────────────
# Orchestrator
# ────────────────────────────────────────────────────────────────


class OfferCache(Protocol):
    def get(self, key: str) -> Optional[OfferSet]: ...

    def put(self, key: str, offers: OfferSet) -> bool: ...


class OfferClient(Protocol):
    def asearch(self, query: TripQuery) -> Awaitable[OfferSet]: ...


Presenter = Callable[[SearchState], None]


class SearchOrchestrator:
    """Run searches against *cache* and *client*.

    ``state`` holds the last delivered result. A submission whose fetch
    finishes after a newer submission was made ends as ``SUPERSEDED``: it is
    not cached, not stored in ``state`` and not passed to the presenter.
    """

    def __init__(
        self,
        cache: OfferCache,
        client: OfferClient,
        presenter: Optional[Presenter] = None,
    ) -> None:
        self.cache = cache
        self.client = client
        self.presenter = presenter
        self.state = SearchState()
        self._seq = 0

    def validate(self, fields: Mapping[str, Optional[str]]) -> TripQuery:
        return parse_trip_query(fields)

    def _step(self, state: SearchState, event: object) -> SearchState:
        new = transition(state, event)
        logger.debug(
            "Search #%s: %s ➔ %s", new.seq, state.phase.value, new.phase.value
        )
        return new

    def _deliver(self, state: SearchState) -> SearchState:
        self.state = state
        if self.presenter is not None:
            self.presenter(state)
        return state

    def _is_stale(self, seq: int) -> bool:
        return seq != self._seq

    async def submit(self, fields: Mapping[str, Optional[str]]) -> SearchState:
        """Run one search to completion and return its terminal state."""
        self._seq += 1
        seq = self._seq
        state = self._step(SearchState(), Submitted(seq))

        try:
            query = self.validate(fields)
        except ValidationError as exc:
            logger.info("Search #%s rejected: %s", seq, exc)
            return self._deliver(self._step(state, QueryRejected(exc)))

        key = encode(query)
        state = self._step(state, QueryAccepted(query, key))

        cached = self.cache.get(key)
        if cached is not None:
            logger.info("Cache hit for %s", key)
            return self._deliver(self._step(state, CacheHit(cached)))

        logger.info("Cache miss for %s", key)
        state = self._step(state, CacheMissed())

        try:
            offers = await self.client.asearch(query)
        except NetworkError as exc:
            if self._is_stale(seq):
                return self._step(state, Superseded())
            logger.warning("Search #%s failed: %s", seq, exc)
            return self._deliver(self._step(state, FetchFailed(exc)))

        if self._is_stale(seq):
            logger.info(
                "Discarding result for %s: search #%s superseded by #%s",
                key,
                seq,
                self._seq,
            )
            return self._step(state, Superseded())

        state = self._step(state, FetchSucceeded(offers))
        stored = self.cache.put(key, offers)
        return self._deliver(self._step(state, CacheWritten(stored)))


__all__ = [
    "Phase",
    "SearchState",
    "Submitted",
    "QueryAccepted",
    "QueryRejected",
    "CacheHit",
    "CacheMissed",
    "FetchSucceeded",
    "FetchFailed",
    "CacheWritten",
    "Superseded",
    "InvalidTransition",
    "transition",
    "Presenter",
    "SearchOrchestrator",
]
