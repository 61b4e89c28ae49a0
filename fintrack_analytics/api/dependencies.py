"""Dependency injection for FastAPI endpoints"""

from typing import Optional
from fastapi import Depends, Request
from fintrack_analytics.config import settings
from fintrack_analytics.domain.cache import AnalyticsCache
from fintrack_analytics.domain.ledger import LedgerStore
from fintrack_analytics.domain.orchestrator import AnalyticsEngine
from fintrack_analytics.infrastructure.clients.ledger import HttpLedgerStore
from fintrack_analytics.infrastructure.database.repositories import SqlLedgerStore
from fintrack_analytics.infrastructure.database.session import SessionLocal

# Process-wide report cache shared by all requests
_report_cache = AnalyticsCache(max_entries=settings.cache_max_entries)


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_ledger_store() -> LedgerStore:
    """Provide the configured ledger store"""
    if settings.ledger_backend == "http":
        return HttpLedgerStore()
    return SqlLedgerStore(SessionLocal)


def get_analytics_cache() -> Optional[AnalyticsCache]:
    return _report_cache if settings.cache_enabled else None


def get_analytics_engine(
    store: LedgerStore = Depends(get_ledger_store),
    cache: Optional[AnalyticsCache] = Depends(get_analytics_cache),
) -> AnalyticsEngine:
    """Provide an analytics engine bound to the request's ledger store"""
    return AnalyticsEngine(store, cache=cache)
