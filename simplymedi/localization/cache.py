"""
Translation cache.

Entries are keyed by (text, language, context). Switching language never
invalidates anything because the language is part of the key. The cache
is unbounded by default, which is fine for one client session; long-lived
processes should pass `max_entries` (least recently used entries are
evicted first) and optionally `ttl_seconds`.

`merged` copies every entry; callers adding many strings should merge them
in one call.
"""

import time
from collections import OrderedDict
from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple


class CacheKey(NamedTuple):
    text: str
    language: str
    context: str = "general"

    def __str__(self) -> str:
        return f"{self.text}_{self.language}_{self.context}"


class TranslationCache:
    """Read-through translation cache with optional size and age bounds."""

    def __init__(
        self,
        max_entries: Optional[int] = None,
        ttl_seconds: Optional[float] = None,
        clock=time.monotonic
    ):
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be positive")
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: "OrderedDict[CacheKey, Tuple[str, float]]" = OrderedDict()

    def get(self, key: CacheKey) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None

        value, stored_at = entry
        if self.ttl_seconds is not None and self._clock() - stored_at >= self.ttl_seconds:
            del self._entries[key]
            return None

        self._entries.move_to_end(key)
        return value

    def put(self, key: CacheKey, value: str) -> None:
        """Store a translation, last write wins."""
        self._entries[key] = (value, self._clock())
        self._entries.move_to_end(key)
        if self.max_entries is not None:
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def put_many(self, entries: Iterable[Tuple[CacheKey, str]]) -> None:
        for key, value in entries:
            self.put(key, value)

    def merged(self, entries: Dict[CacheKey, str]) -> "TranslationCache":
        """Return a copy of this cache with `entries` added."""
        copy = TranslationCache(self.max_entries, self.ttl_seconds, self._clock)
        copy._entries = OrderedDict(self._entries)
        copy.put_many(entries.items())
        return copy

    def clear(self) -> None:
        self._entries.clear()

    def keys(self) -> List[CacheKey]:
        return list(self._entries)

    def stats(self, sample_size: int = 10) -> Dict[str, object]:
        return {
            "size": len(self._entries),
            "max_entries": self.max_entries,
            "entries": [str(key) for key in list(self._entries)[:sample_size]],
        }

    def __contains__(self, key: CacheKey) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self._entries)
