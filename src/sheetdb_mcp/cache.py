# Google SheetDB MCP Server
# File: cache.py
# Version: v1

"""In-process TTL cache for tab metadata (tab list, header rows).

Keys are tuples whose first element is a namespace such as ``"tabs"`` or
``"header"``; ``invalidate`` drops a whole namespace, or the entries of
one tab, after create/drop/truncate.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Dict, Hashable, Optional, Tuple

CacheKey = Tuple[Hashable, ...]


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    sets: int = 0
    evictions: int = 0
    expirations: int = 0
    invalidations: int = 0


class MetadataCache:
    """TTL entries with oldest-first eviction past ``max_entries``.

    A ``ttl_seconds`` or ``max_entries`` of 0 disables the cache.
    """

    def __init__(self, ttl_seconds: int = 60, max_entries: int = 128) -> None:
        self.ttl_seconds = int(ttl_seconds)
        self.max_entries = int(max_entries)
        self._entries: "OrderedDict[CacheKey, Tuple[float, Any]]" = OrderedDict()
        self._stats = CacheStats()

    @property
    def enabled(self) -> bool:
        return self.ttl_seconds > 0 and self.max_entries > 0

    def get(self, key: CacheKey) -> Optional[Any]:
        if not self.enabled:
            self._stats.misses += 1
            return None

        entry = self._entries.get(key)
        if entry is None:
            self._stats.misses += 1
            return None

        expires_at, value = entry
        if expires_at < time.monotonic():
            self._entries.pop(key, None)
            self._stats.misses += 1
            self._stats.expirations += 1
            return None

        self._entries.move_to_end(key)
        self._stats.hits += 1
        return value

    def set(self, key: CacheKey, value: Any) -> None:
        if not self.enabled:
            return

        self._entries[key] = (time.monotonic() + self.ttl_seconds, value)
        self._entries.move_to_end(key)
        self._stats.sets += 1

        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)
            self._stats.evictions += 1

    def invalidate(self, namespace: Optional[str] = None, table: Optional[str] = None) -> int:
        """Drop entries by namespace and/or tab name; no arguments drops everything."""
        doomed = [
            key
            for key in self._entries
            if (namespace is None or key[0] == namespace)
            and (table is None or table in key[1:])
        ]
        for key in doomed:
            del self._entries[key]
        self._stats.invalidations += len(doomed)
        return len(doomed)

    def purge_expired(self) -> int:
        now = time.monotonic()
        expired = [k for k, (exp, _) in self._entries.items() if exp < now]
        for key in expired:
            del self._entries[key]
        self._stats.expirations += len(expired)
        return len(expired)

    def stats(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "ttl_seconds": self.ttl_seconds,
            "max_entries": self.max_entries,
            "size": len(self._entries),
            "hits": self._stats.hits,
            "misses": self._stats.misses,
            "sets": self._stats.sets,
            "evictions": self._stats.evictions,
            "expirations": self._stats.expirations,
            "invalidations": self._stats.invalidations,
        }
