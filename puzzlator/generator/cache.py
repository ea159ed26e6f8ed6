"""
Puzzle Cache - Keeps generated puzzles in memory by request key.

The cache:
- Is keyed by GenerationRequest.cache_key()
- Evicts the least recently used entry at capacity
- Expires entries older than ttl_seconds (checked lazily on get)
- Lives in-process only (cleared on restart)
"""

from __future__ import annotations
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable
import time

from .models import GeneratedPuzzle


@dataclass
class CacheEntry:
    puzzle: GeneratedPuzzle
    created_at: float
    access_count: int = 0


class PuzzleCache:
    """
    LRU + TTL cache for generated puzzles.

    Usage:
        cache = PuzzleCache(max_entries=100, ttl_seconds=3600)

        puzzle = cache.get(request.cache_key())
        if puzzle is None:
            puzzle = generate(request)
            cache.put(request.cache_key(), puzzle)
    """

    def __init__(
        self,
        max_entries: int = 100,
        ttl_seconds: float = 3600.0,
        clock: Callable[[], float] = time.time,
    ):
        if max_entries < 1:
            raise ValueError(f"max_entries must be at least 1, got {max_entries}")
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self.hits = 0
        self.misses = 0
        self.evictions = 0
        self.expirations = 0

    def get(self, key: str) -> GeneratedPuzzle | None:
        """Cached puzzle for key, or None if missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None

        if self.clock() - entry.created_at > self.ttl_seconds:
            del self._entries[key]
            self.expirations += 1
            self.misses += 1
            return None

        self._entries.move_to_end(key)
        entry.access_count += 1
        self.hits += 1
        return entry.puzzle

    def put(self, key: str, puzzle: GeneratedPuzzle):
        if key in self._entries:
            self._entries.move_to_end(key)
        elif len(self._entries) >= self.max_entries:
            self._entries.popitem(last=False)
            self.evictions += 1
        self._entries[key] = CacheEntry(puzzle=puzzle, created_at=self.clock())

    def invalidate(self, key: str):
        self._entries.pop(key, None)

    def clear(self):
        """Drop all entries and reset stats."""
        self._entries.clear()
        self.hits = 0
        self.misses = 0
        self.evictions = 0
        self.expirations = 0

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def stats(self) -> dict[str, Any]:
        lookups = self.hits + self.misses
        return {
            "entries": len(self._entries),
            "max_entries": self.max_entries,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "expirations": self.expirations,
            "hit_rate": self.hits / lookups if lookups else 0.0,
        }
