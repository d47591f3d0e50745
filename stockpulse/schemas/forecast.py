from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


class RiskLevel(str, Enum):
    SAFE = "Safe"
    LOW = "Low"
    CRITICAL = "Critical"

class ReorderTimeframe(str, Enum):
    IMMEDIATELY = "Immediately"
    WITHIN_3_DAYS = "Within 3 days"
    WITHIN_1_WEEK = "Within 1 week"

class InsightImpact(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class DailyRevenuePoint(BaseModel):
    date: date
    revenue: float

class ForecastPoint(DailyRevenuePoint):
    is_forecast: bool = False

class ForecastSeries(BaseModel):
    points: List[ForecastPoint]
    historical_count: int

class ForecastSummary(BaseModel):
    predicted_revenue_7d: float
    predicted_revenue_30d: float
    predicted_sales_growth_pct: float
    predicted_stock_out_count: int
    previous_period_revenue: float


class StockDepletionRow(BaseModel):
    product_id: int
    product_name: str
    current_quantity: int
    avg_daily_sales: float
    # None means the product has stock but no sales in the window
    estimated_days_left: Optional[float] = None
    risk_level: RiskLevel

class ReorderRecommendation(BaseModel):
    product_id: int
    product_name: str
    suggested_quantity: int
    timeframe: ReorderTimeframe
    reason: str

class SlowMovingRow(BaseModel):
    product_id: int
    product_name: str
    days_since_last_sale: int
    current_quantity: int


class BusinessInsight(BaseModel):
    title: str
    text: str
    impact: InsightImpact
    confidence: int

class ReportRecommendation(BaseModel):
    title: str
    description: str

class ReportStats(BaseModel):
    days_of_inventory: int
    avg_daily_demand: float
    stock_value: float
    active_recommendations: int

class ReportForecast(BaseModel):
    expected_sales_volume: int
    sales_volume_change_percent: float
    projected_revenue: float
    revenue_change_percent: float
    reorder_requirements_count: int

class BusinessReport(BaseModel):
    start_date: date
    end_date: date
    stats: ReportStats
    insights: List[BusinessInsight]
    forecast: ReportForecast
    recommendations: List[ReportRecommendation]
