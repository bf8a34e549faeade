"""Unit tests for the TTL cache."""

import pytest

from finx.data.cache import CacheEntry, TTLCache

from conftest import FakeClock


class TestCacheEntry:
    """Test expiry arithmetic of a single entry."""

    def test_valid_until_ttl_elapsed(self):
        entry = CacheEntry(value=1, written_at=100.0, ttl_seconds=10)

        assert not entry.is_expired(105.0)
        assert not entry.is_expired(110.0)
        assert entry.is_expired(110.5)
        assert entry.age_seconds(104.0) == 4.0


class TestTTLCache:
    """Test cache reads, writes and expiry."""

    @pytest.fixture
    def fake_clock(self):
        return FakeClock()

    @pytest.fixture
    def cache(self, fake_clock):
        return TTLCache(clock=fake_clock)

    def test_set_then_get(self, cache):
        """Test immediate read returns the stored value."""
        cache.set("quote:AAPL", {"price": 150}, 300)

        assert cache.get("quote:AAPL") == {"price": 150}

    def test_missing_key_returns_default(self, cache):
        assert cache.get("quote:MSFT") is None
        assert cache.get("quote:MSFT", "fallback") == "fallback"

    def test_expires_after_ttl(self, cache, fake_clock):
        """Test a read after ttl + 1 misses and drops the entry."""
        cache.set("quote:AAPL", {"price": 150}, 300)

        fake_clock.advance(301)

        assert cache.get("quote:AAPL") is None
        assert cache.size() == 0

    def test_subsecond_ttl_scenario(self, cache, fake_clock):
        """Test 1s TTL: hit at 0.5s, miss at 1.1s."""
        cache.set("quote:AAPL", {"price": 150}, 1)

        fake_clock.advance(0.5)
        assert cache.get("quote:AAPL") == {"price": 150}

        fake_clock.advance(0.6)
        assert cache.get("quote:AAPL") is None

    def test_overwrite_resets_expiry(self, cache, fake_clock):
        """Test a second write replaces the value and restarts the TTL."""
        cache.set("quote:AAPL", {"price": 150}, 10)
        fake_clock.advance(8)
        cache.set("quote:AAPL", {"price": 155}, 10)
        fake_clock.advance(8)

        assert cache.get("quote:AAPL") == {"price": 155}

        fake_clock.advance(3)
        assert cache.get("quote:AAPL") is None

    def test_delete_and_clear(self, cache):
        cache.set("a", 1, 60)
        cache.set("b", 2, 60)
        cache.set("c", 3, 60)

        cache.delete("a")
        cache.delete("missing")
        assert len(cache) == 2
        assert "a" not in cache
        assert "b" in cache

        cache.clear()
        assert cache.size() == 0

    def test_contains_ignores_expired_entries(self, cache, fake_clock):
        cache.set("a", 1, 5)
        fake_clock.advance(6)

        assert "a" not in cache

    def test_falsy_values_are_cached(self, cache):
        cache.set("search:zzzz", [], 60)

        assert cache.get("search:zzzz", "miss") == []

    def test_stats(self, cache, fake_clock):
        """Test hit, miss and expiration counters."""
        cache.set("a", 1, 5)
        cache.get("a")
        cache.get("b")
        fake_clock.advance(10)
        cache.get("a")

        stats = cache.get_stats()
        assert stats["hits"] == 1
        assert stats["misses"] == 2
        assert stats["expirations"] == 1
        assert stats["entries"] == 0
        assert stats["hit_rate"] == pytest.approx(33.3)
