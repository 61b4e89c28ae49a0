"""In-memory LRU cache of analytics reports keyed by ledger version"""

from collections import OrderedDict
from dataclasses import dataclass
from datetime import date
from typing import Optional

from fintrack_analytics.domain.models import AnalyticsReport


@dataclass(frozen=True)
class CacheKey:
    user_id: str
    period: str
    as_of: date
    ledger_version: str


class AnalyticsCache:
    """
    Bounded least-recently-used report cache.

    Reports are pure functions of the ledger, so a key that includes the ledger
    version is invalidated by any mutation without explicit eviction.
    """

    def __init__(self, max_entries: int = 256):
        self.max_entries = max_entries
        self._entries: "OrderedDict[CacheKey, AnalyticsReport]" = OrderedDict()

    def get(self, key: CacheKey) -> Optional[AnalyticsReport]:
        report = self._entries.get(key)
        if report is not None:
            self._entries.move_to_end(key)
        return report

    def put(self, key: CacheKey, report: AnalyticsReport) -> None:
        self._entries[key] = report
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def __len__(self) -> int:
        return len(self._entries)
