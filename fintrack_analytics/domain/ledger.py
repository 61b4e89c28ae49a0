"""Read-only Ledger Store interface consumed by the analytics engine"""

from typing import List, Protocol
from fintrack_analytics.domain.models import BudgetStatus, DateRange, GroupBy, GroupRow, Transaction


class LedgerStore(Protocol):
    """User-scoped read operations over the transaction ledger.

    Implementations return empty results for windows without data and raise
    DataAccessError when the underlying store cannot be queried.
    """

    def sum_by_group(self, user_id: str, kind: str, date_range: DateRange, group_by: GroupBy) -> List[GroupRow]:
        ...

    def raw_expenses(self, user_id: str, date_range: DateRange) -> List[Transaction]:
        ...

    def budget_status(self, user_id: str, month: str) -> List[BudgetStatus]:
        ...

    def ledger_version(self, user_id: str) -> str:
        ...
