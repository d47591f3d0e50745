import strawberry
from datetime import date, datetime
from typing import List, Optional

from stockpulse.api.graphql.common.enums import (
    InsightImpactEnum,
    ReorderTimeframeEnum,
    RiskLevelEnum,
    StockoutRiskEnum,
)


@strawberry.type
class ForecastSummary:
    predicted_revenue_7d: float
    predicted_revenue_30d: float
    predicted_sales_growth_pct: float
    predicted_stock_out_count: int
    previous_period_revenue: float


@strawberry.type
class ForecastPoint:
    date: date
    revenue: float
    is_forecast: bool


@strawberry.type
class SalesForecast:
    points: List[ForecastPoint]
    historical_count: int


@strawberry.type
class StockDepletion:
    product_id: strawberry.ID
    product_name: str
    current_quantity: int
    avg_daily_sales: float
    risk_level: RiskLevelEnum
    estimated_days_left: Optional[float] = None


@strawberry.type
class ReorderRecommendation:
    product_id: strawberry.ID
    product_name: str
    suggested_quantity: int
    timeframe: ReorderTimeframeEnum
    reason: str


@strawberry.type
class SlowMovingProduct:
    product_id: strawberry.ID
    product_name: str
    days_since_last_sale: int
    current_quantity: int


@strawberry.type
class SlowMovingReport:
    window_days: int
    products: List[SlowMovingProduct]


@strawberry.type
class DemandPrediction:
    id: strawberry.ID
    product_id: strawberry.ID
    predicted_demand: float
    suggested_restock: int
    risk_of_stockout: StockoutRiskEnum
    period_start: datetime
    period_end: datetime
    generated_at: datetime
    product_name: Optional[str] = None


@strawberry.type
class BusinessInsight:
    title: str
    text: str
    impact: InsightImpactEnum
    confidence: int


@strawberry.type
class ReportRecommendation:
    title: str
    description: str


@strawberry.type
class ReportStats:
    days_of_inventory: int
    avg_daily_demand: float
    stock_value: float
    active_recommendations: int


@strawberry.type
class ReportForecast:
    expected_sales_volume: int
    sales_volume_change_percent: float
    projected_revenue: float
    revenue_change_percent: float
    reorder_requirements_count: int


@strawberry.type
class BusinessReport:
    start_date: date
    end_date: date
    stats: ReportStats
    insights: List[BusinessInsight]
    forecast: ReportForecast
    recommendations: List[ReportRecommendation]
