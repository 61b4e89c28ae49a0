"""Pydantic schemas for API response validation"""

from pydantic import BaseModel
from datetime import date, datetime
from typing import Dict, List, Optional


class WeekdaySpendingSchema(BaseModel):
    """Average expense per transaction on one day of the week"""

    day_of_week: int
    day_name: str
    avg_spending: float
    transaction_count: int
    common_categories: List[str]


class MonthlyCategorySpendingSchema(BaseModel):
    month: str
    category: str
    total_spending: float
    frequency: int


class InsightSchema(BaseModel):
    type: str
    message: str
    value: str


class SpendingPatternsSchema(BaseModel):
    weekly_patterns: List[WeekdaySpendingSchema]
    monthly_trends: List[MonthlyCategorySpendingSchema]
    insights: List[InsightSchema]


class CategoryPredictionSchema(BaseModel):
    predicted_amount: float
    confidence: str
    trend: str


class PredictionRecommendationSchema(BaseModel):
    type: str
    category: str
    message: str
    action: str


class PredictionsSchema(BaseModel):
    next_month_predictions: Dict[str, CategoryPredictionSchema]
    total_predicted_spending: float
    recommendations: List[PredictionRecommendationSchema]


class HealthFactorSchema(BaseModel):
    factor: str
    impact: int
    status: str


class HealthRecommendationSchema(BaseModel):
    priority: str
    message: str
    action: str


class HealthScoreSchema(BaseModel):
    overall_score: int
    grade: str
    factors: List[HealthFactorSchema]
    recommendations: List[HealthRecommendationSchema]
    metrics: Dict[str, float]


class AnomalySchema(BaseModel):
    transaction_id: str
    date: date
    category: str
    description: Optional[str] = None
    amount: float
    avg_amount: float
    z_score: float
    severity: str
    deviation_percentage: str


class AnomaliesSchema(BaseModel):
    unusual_transactions: List[AnomalySchema]
    summary: Dict[str, int]


class ProjectionPointSchema(BaseModel):
    month: str
    projected_income: float
    projected_expenses: float
    net_flow: float
    running_balance: float


class CashFlowProjectionSchema(BaseModel):
    projection: List[ProjectionPointSchema]
    confidence: str
    trends: Optional[Dict[str, float]] = None
    message: Optional[str] = None


class AnalyticsResponse(BaseModel):
    """Response for GET /v1/analytics/{user_id}; a failed section is null"""

    user_id: str
    generated_at: datetime
    period: str
    spending_patterns: Optional[SpendingPatternsSchema] = None
    predictions: Optional[PredictionsSchema] = None
    health_score: Optional[HealthScoreSchema] = None
    anomalies: Optional[AnomaliesSchema] = None
    cash_flow_projection: Optional[CashFlowProjectionSchema] = None
