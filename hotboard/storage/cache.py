"""
Fetch cache as an explicit value object.

The orchestrator receives a FeedCache, skips sources whose entry is still
fresh, and returns a new FeedCache reflecting the sources it refreshed. No
module-level mutable cache exists; callers (e.g. the watch loop) thread the
value from one run to the next.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class CacheEntry:
    """When a source was last written successfully, and with how many records."""

    fetched_at: datetime
    total: int = 0


def is_fresh(entry: CacheEntry | None, now: datetime, ttl: float | timedelta) -> bool:
    """
    Check whether a cache entry is still within its TTL.

    Args:
        entry: Cache entry, or None for a miss
        now: Reference time
        ttl: Time-to-live in seconds or as a timedelta; 0 disables caching

    Returns:
        True only if now - entry.fetched_at < ttl
    """
    if entry is None:
        return False
    if not isinstance(ttl, timedelta):
        ttl = timedelta(seconds=ttl)
    if ttl <= timedelta(0):
        return False
    age = now - entry.fetched_at
    return timedelta(0) <= age < ttl


@dataclass(frozen=True)
class FeedCache:
    """Immutable mapping of source id to CacheEntry."""

    entries: Mapping[str, CacheEntry] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))

    def get(self, source_id: str) -> CacheEntry | None:
        return self.entries.get(source_id)

    def is_fresh(self, source_id: str, now: datetime, ttl: float | timedelta) -> bool:
        return is_fresh(self.get(source_id), now, ttl)

    def with_entries(self, updates: Mapping[str, CacheEntry]) -> "FeedCache":
        """Return a new cache with updates applied."""
        merged = dict(self.entries)
        merged.update(updates)
        return FeedCache(merged)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, source_id: object) -> bool:
        return source_id in self.entries
