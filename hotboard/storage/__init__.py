"""Storage layer - snapshot files and the fetch cache value object."""

from hotboard.storage.cache import CacheEntry, FeedCache, is_fresh
from hotboard.storage.snapshots import SnapshotWriter, items_of

__all__ = ["CacheEntry", "FeedCache", "is_fresh", "SnapshotWriter", "items_of"]
