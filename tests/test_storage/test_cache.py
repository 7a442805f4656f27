"""Tests for the fetch cache value object."""

from datetime import timedelta

import pytest

from conftest import FIXED_NOW

from hotboard.storage.cache import CacheEntry, FeedCache, is_fresh


class TestIsFresh:
    """Tests for is_fresh."""

    def test_within_ttl(self):
        entry = CacheEntry(fetched_at=FIXED_NOW - timedelta(seconds=299))

        assert is_fresh(entry, FIXED_NOW, 300) is True

    def test_at_ttl_is_stale(self):
        entry = CacheEntry(fetched_at=FIXED_NOW - timedelta(seconds=300))

        assert is_fresh(entry, FIXED_NOW, 300) is False

    def test_timedelta_ttl(self):
        entry = CacheEntry(fetched_at=FIXED_NOW - timedelta(minutes=1))

        assert is_fresh(entry, FIXED_NOW, timedelta(minutes=5)) is True

    def test_zero_ttl_disables(self):
        assert is_fresh(CacheEntry(fetched_at=FIXED_NOW), FIXED_NOW, 0) is False

    def test_missing_entry(self):
        assert is_fresh(None, FIXED_NOW, 300) is False

    def test_entry_from_the_future_is_stale(self):
        entry = CacheEntry(fetched_at=FIXED_NOW + timedelta(minutes=1))

        assert is_fresh(entry, FIXED_NOW, 300) is False


class TestFeedCache:
    """Tests for FeedCache."""

    def test_with_entries_returns_new_cache(self):
        empty = FeedCache()

        cache = empty.with_entries({"weibo": CacheEntry(fetched_at=FIXED_NOW, total=50)})

        assert len(empty) == 0
        assert "weibo" in cache
        assert cache.get("weibo").total == 50
        assert cache.is_fresh("weibo", FIXED_NOW + timedelta(seconds=10), 300)

    def test_entries_are_read_only(self):
        cache = FeedCache({"weibo": CacheEntry(fetched_at=FIXED_NOW)})

        with pytest.raises(TypeError):
            cache.entries["zhihu"] = CacheEntry(fetched_at=FIXED_NOW)

    def test_caller_mapping_not_shared(self):
        source = {"weibo": CacheEntry(fetched_at=FIXED_NOW)}
        cache = FeedCache(source)

        source["zhihu"] = CacheEntry(fetched_at=FIXED_NOW)

        assert "zhihu" not in cache

    def test_with_entries_overwrites_existing(self):
        cache = FeedCache(
            {
                "weibo": CacheEntry(fetched_at=FIXED_NOW, total=1),
                "zhihu": CacheEntry(fetched_at=FIXED_NOW, total=2),
            }
        )

        updated = cache.with_entries({"weibo": CacheEntry(fetched_at=FIXED_NOW, total=9)})

        assert updated.get("weibo").total == 9
        assert updated.get("zhihu").total == 2
        assert cache.get("weibo").total == 1
