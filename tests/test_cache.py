"""
Tests for the analysis result cache.

These tests verify:
- Cache key normalization
- TTL expiry with an injected clock
- Mock results are never cached
- Copies in and out
- Invalidation and statistics
"""

from datetime import datetime, timedelta

import pytest

from gapscope.gaps import AnalysisResult, GapResultCache, StrategyName, make_cache_key, score_gap


class _Clock:
    def __init__(self):
        self.now = datetime(2024, 1, 15, 10, 30, 0)

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return _Clock()


@pytest.fixture
def result():
    gap = score_gap("widget pricing", 1200, 25, "rival.com", 3, "example.com")
    return AnalysisResult(gaps=[gap], strategy=StrategyName.DIRECT)


class TestCacheKey:
    """Test key construction."""

    def test_normalized_and_sorted(self):
        assert make_cache_key("https://www.Example.com", ["www.b.com", "A.com/"], 2840) == (
            "example.com", ("a.com", "b.com"), 2840,
        )

    def test_competitor_order_irrelevant(self):
        assert make_cache_key("example.com", ["a.com", "b.com"], 2840) == make_cache_key(
            "example.com", ["b.com", "a.com"], 2840
        )

    def test_location_matters(self):
        assert make_cache_key("example.com", ["a.com"], 2840) != make_cache_key("example.com", ["a.com"], 2752)


class TestGapResultCache:
    """Test cache behavior."""

    def test_hit_after_set(self, result):
        cache = GapResultCache()
        cache.set("example.com", ["rival.com"], 2840, result)

        cached = cache.get("https://example.com", ["www.rival.com"], 2840)

        assert cached is not None
        assert cached.gaps[0].keyword == "widget pricing"
        assert cache.get_stats()["hits"] == 1

    def test_miss(self):
        cache = GapResultCache()
        assert cache.get("example.com", ["rival.com"], 2840) is None
        assert cache.get_stats()["misses"] == 1

    def test_expiry(self, result, clock):
        cache = GapResultCache(ttl_minutes=60, clock=clock)
        cache.set("example.com", ["rival.com"], 2840, result)

        clock.now += timedelta(minutes=59)
        assert cache.get("example.com", ["rival.com"], 2840) is not None

        clock.now += timedelta(minutes=2)
        assert cache.get("example.com", ["rival.com"], 2840) is None
        assert len(cache) == 0

    def test_mock_results_not_cached(self, result):
        cache = GapResultCache()
        mock_result = AnalysisResult(gaps=result.gaps, strategy=StrategyName.MOCK)

        cache.set("example.com", ["rival.com"], 2840, mock_result)

        assert len(cache) == 0

    def test_returned_copies_are_independent(self, result):
        cache = GapResultCache()
        cache.set("example.com", ["rival.com"], 2840, result)

        result.gaps[0].is_top_opportunity = True
        first = cache.get("example.com", ["rival.com"], 2840)
        first.gaps[0].keyword = "changed"
        second = cache.get("example.com", ["rival.com"], 2840)

        assert second.gaps[0].keyword == "widget pricing"
        assert second.gaps[0].is_top_opportunity is False

    def test_evicts_oldest(self, result, clock):
        cache = GapResultCache(max_entries=2, clock=clock)
        for i, domain in enumerate(["a.com", "b.com", "c.com"]):
            clock.now += timedelta(seconds=i + 1)
            cache.set(domain, ["rival.com"], 2840, result)

        assert len(cache) == 2
        assert cache.get("a.com", ["rival.com"], 2840) is None
        assert cache.get("c.com", ["rival.com"], 2840) is not None

    def test_disabled(self, result):
        cache = GapResultCache(enabled=False)
        cache.set("example.com", ["rival.com"], 2840, result)
        assert cache.get("example.com", ["rival.com"], 2840) is None

    def test_invalidate_domain(self, result):
        cache = GapResultCache()
        cache.set("example.com", ["rival.com"], 2840, result)
        cache.set("example.com", ["other.com"], 2840, result)
        cache.set("another.com", ["rival.com"], 2840, result)

        assert cache.invalidate("www.example.com") == 2
        assert len(cache) == 1
        assert cache.invalidate() == 1

    def test_stats(self, result):
        cache = GapResultCache()
        cache.set("example.com", ["rival.com"], 2840, result)
        cache.get("example.com", ["rival.com"], 2840)
        cache.get("example.com", ["other.com"], 2840)

        stats = cache.get_stats()
        assert stats["hit_rate_percent"] == 50.0
        assert stats["entry_count"] == 1
