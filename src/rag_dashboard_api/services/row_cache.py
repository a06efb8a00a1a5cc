from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any, Hashable, Protocol


class RowCache(Protocol):
    async def get(self, key: Hashable) -> Any | None:
        ...

    async def set(self, key: Hashable, value: Any) -> None:
        ...


class InMemoryRowCache:
    """Per-process TTL cache for fetched dataset pages.

    Evaluation runs only append rows, so a page may be served stale for up to
    ``ttl_seconds``. Concurrent misses for the same key each fetch on their own.
    """

    def __init__(self, ttl_seconds: int = 3600, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = max(int(ttl_seconds), 0)
        self._clock = clock
        self._store: dict[Hashable, tuple[float, Any]] = {}

    async def get(self, key: Hashable) -> Any | None:
        item = self._store.get(key)
        if not item:
            return None
        expires_at, value = item
        if expires_at <= self._clock():
            self._store.pop(key, None)
            return None
        return value

    async def set(self, key: Hashable, value: Any) -> None:
        if self.ttl_seconds <= 0:
            return
        self._store[key] = (self._clock() + self.ttl_seconds, value)
