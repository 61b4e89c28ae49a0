"""Domain models - pure Python dataclasses representing ledger data and analytics results"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple

INCOME = "income"
EXPENSE = "expense"


class GroupBy(str, Enum):
    """Dimensions the ledger store can group sums by"""

    WEEKDAY = "weekday"
    MONTH = "month"
    CATEGORY = "category"
    MONTH_CATEGORY = "month_category"


@dataclass(frozen=True)
class DateRange:
    """Inclusive date window"""

    start: date
    end: date


@dataclass
class Transaction:
    """Ledger transaction, read-only to the analytics engine"""

    transaction_id: str
    user_id: str
    amount: float
    kind: str  # "income" or "expense"
    category: str
    date: date
    description: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class GroupRow:
    """One grouped sum returned by the ledger store.

    Only the keys of the requested grouping are set; `categories` always holds the
    distinct categories that contributed to the group.
    """

    total: float
    count: int
    weekday: Optional[int] = None  # 0=Sunday .. 6=Saturday
    month: Optional[str] = None  # YYYY-MM
    category: Optional[str] = None
    categories: FrozenSet[str] = frozenset()


@dataclass
class BudgetStatus:
    """Budget vs actual spending for one category in one month"""

    category: str
    budgeted: float
    actual: float
    status: str  # "under_budget" | "at_budget" | "over_budget"


# Spending patterns


@dataclass
class WeekdaySpending:
    day_of_week: int
    day_name: str
    avg_spending: float
    transaction_count: int
    common_categories: List[str]


@dataclass
class MonthlyCategorySpending:
    month: str
    category: str
    total_spending: float
    frequency: int


@dataclass
class Insight:
    type: str
    message: str
    value: str


@dataclass
class SpendingPatterns:
    weekly_patterns: List[WeekdaySpending]
    monthly_trends: List[MonthlyCategorySpending]
    insights: List[Insight]


# Predictions


@dataclass
class MonthlySeries:
    """Chronological (month label, total) points for one category and kind"""

    category: str
    kind: str
    points: List[Tuple[str, float]] = field(default_factory=list)

    @property
    def values(self) -> List[float]:
        return [total for _, total in self.points]


@dataclass
class CategoryPrediction:
    predicted_amount: float
    confidence: str  # "high" | "medium" | "low"
    trend: str  # "increasing" | "decreasing" | "stable"


@dataclass
class PredictionRecommendation:
    type: str
    category: str
    message: str
    action: str


@dataclass
class PredictionSummary:
    next_month_predictions: Dict[str, CategoryPrediction]
    total_predicted_spending: float
    recommendations: List[PredictionRecommendation]


# Health score


@dataclass
class HealthInputs:
    """Trailing-window totals and current-month budget status feeding the health score"""

    total_income: float
    total_expenses: float
    category_diversity: int
    budgets: List[BudgetStatus]


@dataclass
class HealthFactor:
    factor: str
    impact: int
    status: str  # "positive" | "neutral" | "negative"


@dataclass
class HealthRecommendation:
    priority: str
    message: str
    action: str


@dataclass
class HealthScore:
    overall_score: int
    grade: str
    factors: List[HealthFactor]
    recommendations: List[HealthRecommendation]
    metrics: Dict[str, float]


# Anomalies


@dataclass
class CategoryBaseline:
    """Dispersion baseline of one expense category over the trailing window"""

    category: str
    mean: float
    std: float
    sample_count: int


@dataclass
class AnomalyRecord:
    transaction_id: str
    date: date
    category: str
    description: Optional[str]
    amount: float
    avg_amount: float
    z_score: float
    severity: str  # "high" | "medium" | "low"
    deviation_percentage: str  # signed, one decimal: "+1100.0"


@dataclass
class AnomalyReport:
    unusual_transactions: List[AnomalyRecord]
    summary: Dict[str, int]


# Cash flow


@dataclass
class MonthlyCashFlow:
    month: str
    income: float
    expenses: float


@dataclass
class ProjectionPoint:
    month: str
    projected_income: float
    projected_expenses: float
    net_flow: float
    running_balance: float


@dataclass
class CashFlowProjection:
    projection: List[ProjectionPoint]
    confidence: str
    trends: Optional[Dict[str, float]] = None
    message: Optional[str] = None


# Report envelope


@dataclass
class AnalyticsReport:
    """Output of the analytics orchestrator; any section is None when it failed"""

    user_id: str
    generated_at: datetime
    period: str
    spending_patterns: Optional[SpendingPatterns] = None
    predictions: Optional[PredictionSummary] = None
    health_score: Optional[HealthScore] = None
    anomalies: Optional[AnomalyReport] = None
    cash_flow_projection: Optional[CashFlowProjection] = None
