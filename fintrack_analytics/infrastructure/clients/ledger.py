"""Ledger service HTTP client implementing the read-only ledger store"""

import httpx
from urllib.parse import quote
from datetime import date, datetime
from typing import Any, Dict, List
from fintrack_analytics.domain.models import BudgetStatus, DateRange, GroupBy, GroupRow, Transaction
from fintrack_analytics.domain.exceptions import DataAccessError
from fintrack_analytics.config import settings


class HttpLedgerStore:
    """Client for a remote ledger service exposing grouped and raw transaction reads"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url or settings.ledger_api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    def sum_by_group(self, user_id: str, kind: str, date_range: DateRange, group_by: GroupBy) -> List[GroupRow]:
        data = self._get(
            f"/ledger/users/{quote(user_id, safe='')}/groups",
            {
                "kind": kind,
                "start": date_range.start.isoformat(),
                "end": date_range.end.isoformat(),
                "group_by": group_by.value,
            },
        )
        try:
            return [
                GroupRow(
                    total=float(row["total"]),
                    count=int(row["count"]),
                    weekday=row.get("weekday"),
                    month=row.get("month"),
                    category=row.get("category"),
                    categories=frozenset(row.get("categories", [])),
                )
                for row in data.get("rows", [])
            ]
        except (KeyError, ValueError, TypeError) as e:
            raise DataAccessError(f"Invalid grouped data from ledger: {e}") from e

    def raw_expenses(self, user_id: str, date_range: DateRange) -> List[Transaction]:
        """
        Fetch expense transactions within a date window.

        Raises:
            DataAccessError: On timeout, HTTP errors, or invalid response
        """
        data = self._get(
            f"/ledger/users/{quote(user_id, safe='')}/expenses",
            {"start": date_range.start.isoformat(), "end": date_range.end.isoformat()},
        )
        try:
            return [
                Transaction(
                    transaction_id=str(txn["id"]),
                    user_id=user_id,
                    amount=float(txn["amount"]),
                    kind=txn["type"],
                    category=txn["category"],
                    date=date.fromisoformat(txn["date"]),
                    description=txn.get("description"),
                    created_at=datetime.fromisoformat(txn["created_at"]) if txn.get("created_at") else None,
                )
                for txn in data.get("transactions", [])
            ]
        except (KeyError, ValueError, TypeError) as e:
            raise DataAccessError(f"Invalid transaction data from ledger: {e}") from e

    def budget_status(self, user_id: str, month: str) -> List[BudgetStatus]:
        data = self._get(f"/ledger/users/{quote(user_id, safe='')}/budgets", {"month": month})
        try:
            return [
                BudgetStatus(
                    category=b["category"],
                    budgeted=float(b["budgeted"]),
                    actual=float(b["actual"]),
                    status=b["status"],
                )
                for b in data.get("budgets", [])
            ]
        except (KeyError, ValueError, TypeError) as e:
            raise DataAccessError(f"Invalid budget data from ledger: {e}") from e

    def ledger_version(self, user_id: str) -> str:
        data = self._get(f"/ledger/users/{quote(user_id, safe='')}/version", {})
        try:
            return str(data["version"])
        except KeyError as e:
            raise DataAccessError("Ledger version missing from response") from e

    def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        with httpx.Client(base_url=self.base_url, timeout=self.timeout, transport=self.transport) as client:
            try:
                response = client.get(path, params=params)
                # Unknown users have no data rather than an error
                if response.status_code == 404:
                    return {}
                response.raise_for_status()
                return response.json()

            except httpx.TimeoutException as e:
                raise DataAccessError(f"Ledger service timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise DataAccessError(f"Ledger service error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise DataAccessError(f"Ledger service unreachable: {e}") from e
            except ValueError as e:
                raise DataAccessError(f"Invalid JSON from ledger service: {e}") from e
