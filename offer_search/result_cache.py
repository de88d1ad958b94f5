from __future__ import annotations

import json
import logging
from typing import Optional, Protocol

from .db import CacheError
from .models import OfferSet

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    """In-process store; contents are lost when the process exits."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class ResultCache:
    """Write-through map from cache keys to offer sets.

    Storage problems never reach the caller: a failed or corrupt read is a
    miss and a failed write is reported as ``False``.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def get(self, key: str) -> Optional[OfferSet]:
        try:
            raw = self.store.get(key)
        except (CacheError, OSError) as exc:
            logger.warning("Cache read failed for %s: %s", key, exc)
            return None
        if raw is None:
            return None

        try:
            return OfferSet.from_payload(json.loads(raw))
        except ValueError as exc:
            logger.warning("Ignoring corrupt cache entry %s: %s", key, exc)
            return None

    def put(self, key: str, offers: OfferSet) -> bool:
        try:
            raw = json.dumps(offers.to_payload())
            self.store.set(key, raw)
        except (CacheError, OSError, TypeError, ValueError) as exc:
            logger.warning("Cache write failed for %s: %s", key, exc)
            return False
        return True


__all__ = ["KeyValueStore", "MemoryStore", "ResultCache"]
