"""SQL-backed ledger store"""

import calendar
import hashlib
from datetime import date
from typing import Dict, List, Tuple

from sqlalchemy import Integer, cast, extract, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from fintrack_analytics.domain.exceptions import DataAccessError
from fintrack_analytics.domain.models import (
    EXPENSE,
    BudgetStatus,
    DateRange,
    GroupBy,
    GroupRow,
    Transaction,
)
from fintrack_analytics.infrastructure.database.models import BudgetRecord, TransactionRecord


class SqlLedgerStore:
    """Ledger store reading the transactions and budgets tables.

    Every call opens its own session, so one store can serve concurrent
    analytics sections running in worker threads.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def sum_by_group(self, user_id: str, kind: str, date_range: DateRange, group_by: GroupBy) -> List[GroupRow]:
        """Grouped totals and counts of one kind of transaction within a date window"""
        try:
            with self.session_factory() as db:
                keys = self._group_keys(db, group_by)
                stmt = (
                    select(
                        *keys,
                        TransactionRecord.category,
                        func.sum(TransactionRecord.amount),
                        func.count(TransactionRecord.id),
                    )
                    .where(
                        TransactionRecord.user_id == user_id,
                        TransactionRecord.type == kind,
                        TransactionRecord.date >= date_range.start,
                        TransactionRecord.date <= date_range.end,
                    )
                    .group_by(*keys, TransactionRecord.category)
                )
                rows = db.execute(stmt).all()
        except SQLAlchemyError as e:
            raise DataAccessError(f"Grouped ledger query failed: {e}") from e

        # Fold (group key, category) rows into one row per group key
        groups: Dict[Tuple, GroupRow] = {}
        for row in rows:
            key = tuple(row[: len(keys)])
            category, total, count = row[len(keys)], float(row[-2] or 0), int(row[-1])
            if group_by in (GroupBy.CATEGORY, GroupBy.MONTH_CATEGORY):
                key = key + (category,)

            group = groups.get(key)
            if group is None:
                group = groups[key] = self._empty_group(group_by, key, category)
            group.total += total
            group.count += count
            group.categories = group.categories | {category}

        return list(groups.values())

    def raw_expenses(self, user_id: str, date_range: DateRange) -> List[Transaction]:
        """Expense rows within a date window, oldest first"""
        try:
            with self.session_factory() as db:
                records = db.scalars(
                    select(TransactionRecord)
                    .where(
                        TransactionRecord.user_id == user_id,
                        TransactionRecord.type == EXPENSE,
                        TransactionRecord.date >= date_range.start,
                        TransactionRecord.date <= date_range.end,
                    )
                    .order_by(TransactionRecord.date, TransactionRecord.id)
                ).all()
                return [
                    Transaction(
                        transaction_id=str(r.id),
                        user_id=r.user_id,
                        amount=float(r.amount),
                        kind=r.type,
                        category=r.category,
                        date=r.date,
                        description=r.description,
                        created_at=r.created_at,
                    )
                    for r in records
                ]
        except SQLAlchemyError as e:
            raise DataAccessError(f"Expense ledger query failed: {e}") from e

    def budget_status(self, user_id: str, month: str) -> List[BudgetStatus]:
        """Budgeted vs actual expense per category for a YYYY-MM month"""
        year, month_number = (int(part) for part in month.split("-"))
        start = date(year, month_number, 1)
        end = date(year, month_number, calendar.monthrange(year, month_number)[1])

        try:
            with self.session_factory() as db:
                budgets = db.scalars(
                    select(BudgetRecord)
                    .where(BudgetRecord.user_id == user_id, BudgetRecord.month_year == month)
                    .order_by(BudgetRecord.category)
                ).all()
                actuals = dict(
                    db.execute(
                        select(TransactionRecord.category, func.sum(TransactionRecord.amount))
                        .where(
                            TransactionRecord.user_id == user_id,
                            TransactionRecord.type == EXPENSE,
                            TransactionRecord.date >= start,
                            TransactionRecord.date <= end,
                        )
                        .group_by(TransactionRecord.category)
                    ).all()
                )
        except SQLAlchemyError as e:
            raise DataAccessError(f"Budget query failed: {e}") from e

        statuses = []
        for budget in budgets:
            budgeted = float(budget.amount)
            actual = float(actuals.get(budget.category) or 0)
            if actual > budgeted:
                status = "over_budget"
            elif actual == budgeted:
                status = "at_budget"
            else:
                status = "under_budget"
            statuses.append(BudgetStatus(category=budget.category, budgeted=budgeted, actual=actual, status=status))
        return statuses

    def ledger_version(self, user_id: str) -> str:
        """
        Opaque marker that changes whenever the user's transactions or budgets change.

        Digests the row contents, so edits made by writers that never touch
        `updated_at` (plain UPDATE statements from the ledger service) still
        produce a new version.
        """
        digest = hashlib.sha256()
        try:
            with self.session_factory() as db:
                transactions = db.execute(
                    select(
                        TransactionRecord.id,
                        TransactionRecord.amount,
                        TransactionRecord.type,
                        TransactionRecord.category,
                        TransactionRecord.date,
                        TransactionRecord.description,
                    )
                    .where(TransactionRecord.user_id == user_id)
                    .order_by(TransactionRecord.id)
                )
                for row in transactions:
                    digest.update(repr(tuple(row)).encode())

                digest.update(b"|budgets|")
                budgets = db.execute(
                    select(
                        BudgetRecord.id,
                        BudgetRecord.category,
                        BudgetRecord.amount,
                        BudgetRecord.month_year,
                    )
                    .where(BudgetRecord.user_id == user_id)
                    .order_by(BudgetRecord.id)
                )
                for row in budgets:
                    digest.update(repr(tuple(row)).encode())
        except SQLAlchemyError as e:
            raise DataAccessError(f"Ledger version query failed: {e}") from e

        return digest.hexdigest()

    @staticmethod
    def _group_keys(db: Session, group_by: GroupBy) -> list:
        dialect = db.get_bind().dialect.name
        if dialect == "sqlite":
            weekday = cast(func.strftime("%w", TransactionRecord.date), Integer)
            month = func.strftime("%Y-%m", TransactionRecord.date)
        else:
            weekday = cast(extract("dow", TransactionRecord.date), Integer)
            month = func.to_char(TransactionRecord.date, "YYYY-MM")

        if group_by == GroupBy.WEEKDAY:
            return [weekday.label("weekday")]
        elif group_by in (GroupBy.MONTH, GroupBy.MONTH_CATEGORY):
            return [month.label("month")]
        return []

    @staticmethod
    def _empty_group(group_by: GroupBy, key: Tuple, category: str) -> GroupRow:
        if group_by == GroupBy.WEEKDAY:
            return GroupRow(total=0.0, count=0, weekday=int(key[0]))
        elif group_by == GroupBy.MONTH:
            return GroupRow(total=0.0, count=0, month=key[0])
        elif group_by == GroupBy.MONTH_CATEGORY:
            return GroupRow(total=0.0, count=0, month=key[0], category=category)
        return GroupRow(total=0.0, count=0, category=category)
