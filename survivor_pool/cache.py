"""Bounded time-to-live cache for schedule and results lookups."""

from __future__ import annotations

import time
from collections import OrderedDict
from typing import Any, Callable, Hashable, Optional, Tuple


class ResultsCache:
    """LRU cache whose entries expire ``ttl`` seconds after being stored.

    ``clock`` returns seconds as a float and defaults to ``time.monotonic``;
    tests pass their own.  At most ``max_entries`` keys are kept, the least
    recently used being evicted first.
    """

    def __init__(self, ttl: float = 900.0, max_entries: int = 64, clock: Callable[[], float] = time.monotonic):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._items: "OrderedDict[Hashable, Tuple[float, Any]]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._items)

    def get(self, key: Hashable) -> Optional[Any]:
        item = self._items.get(key)
        if item is None:
            return None
        stored_at, value = item
        if self._clock() - stored_at >= self.ttl:
            del self._items[key]
            return None
        self._items.move_to_end(key)
        return value

    def set(self, key: Hashable, value: Any) -> None:
        self._items[key] = (self._clock(), value)
        self._items.move_to_end(key)
        while len(self._items) > self.max_entries:
            self._items.popitem(last=False)

    def invalidate(self, key: Hashable) -> None:
        self._items.pop(key, None)

    def clear(self) -> None:
        self._items.clear()

    def get_or_fetch(self, key: Hashable, fetch: Callable[[], Any]) -> Any:
        value = self.get(key)
        if value is None:
            value = fetch()
            self.set(key, value)
        return value
