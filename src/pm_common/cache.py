"""In-process TTL cache with bounded size.

One instance per concern (fee settings, order book proxy), created at app
wiring time and passed to the services that read through it. The clock is
injectable so tests can advance time without sleeping.
"""

import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass
class _Entry:
    value: Any
    expires_at: float


@dataclass
class CacheStats:
    total_entries: int
    valid_entries: int
    expired_entries: int
    max_entries: int


class TTLCache:
    """Bounded mapping whose entries expire ttl seconds after being set.

    When full, the oldest inserted entry is evicted first.
    """

    def __init__(
        self,
        max_entries: int = 1024,
        default_ttl: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        if default_ttl <= 0:
            raise ValueError("default_ttl must be > 0")
        self._max_entries = max_entries
        self._default_ttl = default_ttl
        self._clock = clock
        self._entries: OrderedDict[str, _Entry] = OrderedDict()

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        ttl = self._default_ttl if ttl is None else ttl
        self._entries.pop(key, None)
        self._entries[key] = _Entry(value=value, expires_at=self._clock() + ttl)
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)

    def invalidate(self, prefix: str | None = None) -> int:
        """Drop every entry (prefix=None) or those whose key starts with prefix."""
        if prefix is None:
            removed = len(self._entries)
            self._entries.clear()
            return removed
        doomed = [k for k in self._entries if k.startswith(prefix)]
        for key in doomed:
            del self._entries[key]
        return len(doomed)

    def cleanup(self) -> int:
        now = self._clock()
        doomed = [k for k, e in self._entries.items() if e.expires_at <= now]
        for key in doomed:
            del self._entries[key]
        return len(doomed)

    def stats(self) -> CacheStats:
        now = self._clock()
        valid = sum(1 for e in self._entries.values() if e.expires_at > now)
        return CacheStats(
            total_entries=len(self._entries),
            valid_entries=valid,
            expired_entries=len(self._entries) - valid,
            max_entries=self._max_entries,
        )

    def __len__(self) -> int:
        return len(self._entries)
