"""TTL cache for expensive read endpoints."""

import time
from collections.abc import Callable, Hashable
from typing import Any


class ResponseCache:
    """In-process cache keyed by (namespace, key) with a per-namespace TTL.

    Entries are explicitly invalidated on writes that change the underlying
    data (e.g. rule changes drop the `suggested_rules` namespace).
    """

    def __init__(
        self,
        ttls: dict[str, float],
        clock: Callable[[], float] = time.monotonic,
    ):
        self._ttls = dict(ttls)
        self._clock = clock
        self._entries: dict[tuple[str, Hashable], tuple[float, Any]] = {}
        self._hits = 0
        self._misses = 0

    def get(self, namespace: str, key: Hashable) -> Any | None:
        entry = self._entries.get((namespace, key))
        if entry is None:
            self._misses += 1
            return None

        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[(namespace, key)]
            self._misses += 1
            return None

        self._hits += 1
        return value

    def set(self, namespace: str, key: Hashable, value: Any) -> None:
        ttl = self._ttls.get(namespace)
        if ttl is None:
            msg = f"Unknown cache namespace: {namespace}"
            raise KeyError(msg)
        self._entries[(namespace, key)] = (self._clock() + ttl, value)

    def invalidate(self, namespace: str, key: Hashable | None = None) -> None:
        """Drop one entry, or the whole namespace when `key` is None."""
        if key is not None:
            self._entries.pop((namespace, key), None)
            return
        for entry_key in [k for k in self._entries if k[0] == namespace]:
            del self._entries[entry_key]

    def clear(self) -> None:
        self._entries.clear()

    @property
    def stats(self) -> dict[str, Any]:
        """Stored entry count and hit / miss counters since startup."""
        """Get cache statistics."""
        return {
            "entries": len(self._entries),
            "hits": self._hits,
            "misses": self._misses,
            "namespaces": sorted(self._ttls),
        }
