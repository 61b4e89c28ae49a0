"""Unit tests for the report cache"""

from datetime import date, datetime, timezone
from fintrack_analytics.domain.cache import AnalyticsCache, CacheKey
from fintrack_analytics.domain.models import AnalyticsReport


def _report(user_id: str) -> AnalyticsReport:
    return AnalyticsReport(user_id=user_id, generated_at=datetime.now(timezone.utc), period="6months")


def _key(user_id: str, version: str = "v1") -> CacheKey:
    return CacheKey(user_id=user_id, period="6months", as_of=date(2026, 6, 15), ledger_version=version)


def test_lookup_requires_matching_ledger_version():
    cache = AnalyticsCache()
    cache.put(_key("user_1", "v1"), _report("user_1"))

    assert cache.get(_key("user_1", "v1")) is not None
    assert cache.get(_key("user_1", "v2")) is None


def test_evicts_least_recently_used():
    cache = AnalyticsCache(max_entries=2)
    cache.put(_key("a"), _report("a"))
    cache.put(_key("b"), _report("b"))
    cache.get(_key("a"))
    cache.put(_key("c"), _report("c"))

    assert len(cache) == 2
    assert cache.get(_key("b")) is None
    assert cache.get(_key("a")) is not None
