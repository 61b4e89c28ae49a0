"""Integration tests for the SQL and HTTP ledger stores"""

import json
import httpx
import pytest
from datetime import date
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from fintrack_analytics.domain.exceptions import DataAccessError
from fintrack_analytics.domain.models import DateRange, GroupBy
from fintrack_analytics.infrastructure.clients.ledger import HttpLedgerStore
from fintrack_analytics.infrastructure.database.repositories import SqlLedgerStore

USER = "user_1"
JUNE = DateRange(start=date(2026, 6, 1), end=date(2026, 6, 30))
Q2 = DateRange(start=date(2026, 4, 1), end=date(2026, 6, 30))


def test_sum_by_weekday(store, add_transaction):
    add_transaction(USER, 20.0, "expense", "Groceries", date(2026, 6, 7))  # Sunday
    add_transaction(USER, 40.0, "expense", "Dining", date(2026, 6, 14))  # Sunday
    add_transaction(USER, 30.0, "expense", "Bars", date(2026, 6, 12))  # Friday
    add_transaction(USER, 1000.0, "income", "Salary", date(2026, 6, 7))
    add_transaction("someone_else", 999.0, "expense", "Dining", date(2026, 6, 7))

    rows = sorted(store.sum_by_group(USER, "expense", JUNE, GroupBy.WEEKDAY), key=lambda r: r.weekday)

    assert [(r.weekday, r.total, r.count) for r in rows] == [(0, 60.0, 2), (5, 30.0, 1)]
    assert rows[0].categories == frozenset({"Groceries", "Dining"})


def test_sum_by_month_and_category(store, add_transaction):
    add_transaction(USER, 25.0, "expense", "Dining", date(2026, 5, 3))
    add_transaction(USER, 35.0, "expense", "Dining", date(2026, 5, 20))
    add_transaction(USER, 900.0, "expense", "Rent", date(2026, 5, 21))
    add_transaction(USER, 10.0, "expense", "Dining", date(2026, 6, 1))
    add_transaction(USER, 50.0, "expense", "Dining", date(2026, 3, 31))  # outside window

    rows = store.sum_by_group(USER, "expense", Q2, GroupBy.MONTH_CATEGORY)
    by_key = {(r.month, r.category): (r.total, r.count) for r in rows}

    assert by_key == {
        ("2026-05", "Dining"): (60.0, 2),
        ("2026-05", "Rent"): (900.0, 1),
        ("2026-06", "Dining"): (10.0, 1),
    }

    months = {r.month: r.total for r in store.sum_by_group(USER, "expense", Q2, GroupBy.MONTH)}
    assert months == {"2026-05": 960.0, "2026-06": 10.0}

    categories = {r.category: r.count for r in store.sum_by_group(USER, "expense", Q2, GroupBy.CATEGORY)}
    assert categories == {"Dining": 3, "Rent": 1}


def test_empty_window_is_no_data(store):
    assert store.sum_by_group(USER, "expense", JUNE, GroupBy.WEEKDAY) == []
    assert store.raw_expenses(USER, JUNE) == []
    assert store.budget_status(USER, "2026-06") == []


def test_raw_expenses(store, add_transaction):
    add_transaction(USER, 45.5, "expense", "Dining", date(2026, 6, 20), "Dinner")
    add_transaction(USER, 12.0, "expense", "Coffee", date(2026, 6, 2))
    add_transaction(USER, 3000.0, "income", "Salary", date(2026, 6, 1))

    expenses = store.raw_expenses(USER, JUNE)

    assert [t.category for t in expenses] == ["Coffee", "Dining"]
    assert expenses[1].amount == 45.5
    assert expenses[1].description == "Dinner"
    assert expenses[1].date == date(2026, 6, 20)
    assert all(t.kind == "expense" for t in expenses)


def test_budget_status(store, add_transaction, add_budget):
    add_budget(USER, "Dining", 100.0, "2026-06")
    add_budget(USER, "Rent", 900.0, "2026-06")
    add_budget(USER, "Travel", 50.0, "2026-06")
    add_budget(USER, "Dining", 10.0, "2026-05")
    add_transaction(USER, 120.0, "expense", "Dining", date(2026, 6, 4))
    add_transaction(USER, 900.0, "expense", "Rent", date(2026, 6, 1))
    add_transaction(USER, 500.0, "expense", "Travel", date(2026, 5, 30))

    statuses = {b.category: (b.actual, b.status) for b in store.budget_status(USER, "2026-06")}

    assert statuses == {
        "Dining": (120.0, "over_budget"),
        "Rent": (900.0, "at_budget"),
        "Travel": (0.0, "under_budget"),
    }


def test_ledger_version_tracks_mutations(store, add_transaction, add_budget):
    empty = store.ledger_version(USER)
    add_transaction(USER, 10.0, "expense", "Coffee", date(2026, 6, 2))
    after_txn = store.ledger_version(USER)
    add_budget(USER, "Coffee", 50.0, "2026-06")
    after_budget = store.ledger_version(USER)

    assert len({empty, after_txn, after_budget}) == 3
    assert store.ledger_version(USER) == after_budget


def test_ledger_version_tracks_raw_sql_edits(store, session_factory, add_transaction, add_budget):
    txn_id = add_transaction(USER, 5000.0, "income", "Salary", date(2026, 6, 1))
    add_budget(USER, "Dining", 300.0, "2026-06")
    before = store.ledger_version(USER)

    with session_factory() as db:
        db.execute(text("UPDATE transactions SET amount = 1 WHERE id = :id"), {"id": txn_id})
        db.commit()
    after_amount = store.ledger_version(USER)

    with session_factory() as db:
        db.execute(text("UPDATE budgets SET amount = 450 WHERE user_id = :user"), {"user": USER})
        db.commit()
    after_budget = store.ledger_version(USER)

    assert len({before, after_amount, after_budget}) == 3


def test_sql_errors_become_data_access_errors():
    # Fresh in-memory database without tables
    broken = SqlLedgerStore(sessionmaker(bind=create_engine("sqlite://")))

    with pytest.raises(DataAccessError):
        broken.raw_expenses(USER, JUNE)
    with pytest.raises(DataAccessError):
        broken.sum_by_group(USER, "expense", JUNE, GroupBy.CATEGORY)


def _http_store(handler) -> HttpLedgerStore:
    return HttpLedgerStore(base_url="http://ledger.test", timeout=1.0, transport=httpx.MockTransport(handler))


def test_http_store_parses_grouped_rows():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/ledger/users/user_1/groups"
        assert request.url.params["group_by"] == "weekday"
        assert request.url.params["start"] == "2026-06-01"
        return httpx.Response(
            200,
            json={"rows": [{"weekday": 3, "total": "42.50", "count": 2, "categories": ["Dining"]}]},
        )

    rows = _http_store(handler).sum_by_group(USER, "expense", JUNE, GroupBy.WEEKDAY)

    assert len(rows) == 1
    assert rows[0].weekday == 3
    assert rows[0].total == 42.5
    assert rows[0].categories == frozenset({"Dining"})


def test_http_store_parses_expenses_and_budgets():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/expenses"):
            return httpx.Response(
                200,
                json={
                    "transactions": [
                        {"id": 7, "amount": 19.99, "type": "expense", "category": "Books", "date": "2026-06-03"}
                    ]
                },
            )
        assert request.url.params["month"] == "2026-06"
        return httpx.Response(
            200,
            json={"budgets": [{"category": "Books", "budgeted": 50, "actual": 19.99, "status": "under_budget"}]},
        )

    store = _http_store(handler)
    expenses = store.raw_expenses(USER, JUNE)
    budgets = store.budget_status(USER, "2026-06")

    assert expenses[0].transaction_id == "7"
    assert expenses[0].date == date(2026, 6, 3)
    assert budgets[0].status == "under_budget"


def test_http_store_unknown_user_is_empty():
    store = _http_store(lambda request: httpx.Response(404, json={"detail": "user not found"}))

    assert store.raw_expenses(USER, JUNE) == []
    assert store.sum_by_group(USER, "income", JUNE, GroupBy.MONTH) == []


def test_http_store_errors_become_data_access_errors():
    def server_error(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503)

    def timeout(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow ledger", request=request)

    def bad_payload(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=json.dumps({"transactions": [{"id": 1}]}))

    with pytest.raises(DataAccessError, match="503"):
        _http_store(server_error).raw_expenses(USER, JUNE)
    with pytest.raises(DataAccessError, match="timeout"):
        _http_store(timeout).budget_status(USER, "2026-06")
    with pytest.raises(DataAccessError, match="Invalid transaction data"):
        _http_store(bad_payload).raw_expenses(USER, JUNE)


def test_http_store_escapes_user_id_in_path():
    requested = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(request.url)
        return httpx.Response(200, json={"version": "v7", "budgets": []})

    store = _http_store(handler)

    assert store.ledger_version("a?b#c/d") == "v7"
    store.budget_status("a?b#c/d", "2026-06")

    assert requested[0].raw_path == b"/ledger/users/a%3Fb%23c%2Fd/version"
    assert requested[1].path == "/ledger/users/a?b#c/d/budgets"
    assert requested[1].params["month"] == "2026-06"
