"""In-memory TTL cache for query results, keyed by SQL text."""

from __future__ import annotations

import hashlib
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    rows: list[dict[str, Any]]
    inserted_at: float


class QueryCache:
    """
    Insertion-ordered result cache.

    Entries expire lazily on read after ``ttl_seconds``. When the cache grows
    past ``max_entries`` the single oldest inserted entry is dropped.
    """

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        max_entries: int = 100,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    @staticmethod
    def make_key(sql: str) -> str:
        """SHA-256 digest of the full statement."""
        return hashlib.sha256(sql.encode("utf-8")).hexdigest()

    def get(self, key: str) -> list[dict[str, Any]] | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.inserted_at >= self.ttl_seconds:
            del self._entries[key]
            return None
        return entry.rows

    def put(self, key: str, rows: list[dict[str, Any]]) -> None:
        self._entries[key] = CacheEntry(rows=rows, inserted_at=self._clock())
        if len(self._entries) > self.max_entries:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
            logger.debug("Evicted oldest cache entry", extra={"cache_size": len(self._entries)})

    def clear(self) -> int:
        """Drop every entry and return how many were removed."""
        cleared = len(self._entries)
        self._entries.clear()
        return cleared

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
