import time
from typing import Any

from config import settings


class TTLCache:
    """Small in-process cache for provider responses, keyed by request parameters."""

    def __init__(self, ttl: int | None = None, max_entries: int = 512):
        self._store: dict[str, tuple[Any, float]] = {}
        self._ttl = settings.cache_ttl_seconds if ttl is None else ttl
        self._max_entries = max_entries
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Any | None:
        if key in self._store:
            value, ts = self._store[key]
            if time.time() - ts < self._ttl:
                self.hits += 1
                return value
            del self._store[key]
        self.misses += 1
        return None

    def set(self, key: str, value: Any) -> None:
        if self._ttl <= 0:
            return
        if len(self._store) >= self._max_entries and key not in self._store:
            # Drop the oldest entry
            oldest = min(self._store, key=lambda k: self._store[k][1])
            del self._store[oldest]
        self._store[key] = (value, time.time())

    def clear(self) -> None:
        self._store.clear()
        self.hits = 0
        self.misses = 0

    def stats(self) -> dict:
        total = self.hits + self.misses
        return {
            "size": len(self._store),
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": round(self.hits / total * 100, 1) if total > 0 else 0.0,
        }
