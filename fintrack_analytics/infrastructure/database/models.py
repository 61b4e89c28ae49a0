"""SQLAlchemy ORM models for the ledger tables read by the analytics engine"""

from sqlalchemy import CheckConstraint, Column, Date, DateTime, Index, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class TransactionRecord(Base):
    """Income or expense entry owned by a user"""

    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("type IN ('income', 'expense')", name="ck_transactions_type"),
        CheckConstraint("amount > 0", name="ck_transactions_amount_positive"),
        Index("idx_transactions_user_date", "user_id", "date"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False)
    amount = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    type = Column(String(50), nullable=False)
    category = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    date = Column(Date, nullable=False, server_default=func.current_date())
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


class BudgetRecord(Base):
    """Monthly spending budget for one category"""

    __tablename__ = "budgets"
    __table_args__ = (
        UniqueConstraint("user_id", "category", "month_year", name="uq_budgets_user_category_month"),
        Index("idx_budgets_user_month", "user_id", "month_year"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False)
    category = Column(String(100), nullable=False)
    amount = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    month_year = Column(String(7), nullable=False)  # YYYY-MM
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
