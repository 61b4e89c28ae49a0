"""Pytest fixtures for testing"""

import os

# Point the app at SQLite before settings are loaded
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from datetime import date
from typing import Callable, Generator, Optional
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from fintrack_analytics.api.main import create_app
from fintrack_analytics.api.dependencies import get_analytics_cache, get_ledger_store
from fintrack_analytics.domain.cache import AnalyticsCache
from fintrack_analytics.infrastructure.database.models import Base, BudgetRecord, TransactionRecord
from fintrack_analytics.infrastructure.database.repositories import SqlLedgerStore


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def session_factory() -> Generator[sessionmaker, None, None]:
    """Create test database tables for the duration of a test"""
    Base.metadata.create_all(bind=engine)
    try:
        yield TestingSessionLocal
    finally:
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def store(session_factory: sessionmaker) -> SqlLedgerStore:
    return SqlLedgerStore(session_factory)


@pytest.fixture
def add_transaction(session_factory: sessionmaker) -> Callable[..., int]:
    """Insert one ledger transaction and return its id"""

    def _add(
        user_id: str,
        amount: float,
        type: str,
        category: str,
        on: date,
        description: Optional[str] = None,
    ) -> int:
        with session_factory() as db:
            record = TransactionRecord(
                user_id=user_id,
                amount=amount,
                type=type,
                category=category,
                description=description,
                date=on,
            )
            db.add(record)
            db.commit()
            return record.id

    return _add


@pytest.fixture
def add_budget(session_factory: sessionmaker) -> Callable[..., None]:
    def _add(user_id: str, category: str, amount: float, month_year: str) -> None:
        with session_factory() as db:
            db.add(BudgetRecord(user_id=user_id, category=category, amount=amount, month_year=month_year))
            db.commit()

    return _add


@pytest.fixture
def report_cache() -> AnalyticsCache:
    return AnalyticsCache(max_entries=16)


@pytest.fixture
def client(store: SqlLedgerStore, report_cache: AnalyticsCache) -> TestClient:
    """Create FastAPI test client reading the test database"""
    app = create_app()
    app.dependency_overrides[get_ledger_store] = lambda: store
    app.dependency_overrides[get_analytics_cache] = lambda: report_cache
    return TestClient(app)
