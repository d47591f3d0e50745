from typing import List, Optional

from strawberry.types import Info

from stockpulse.api.graphql.forecasting.types import (
    BusinessInsight,
    BusinessReport,
    DemandPrediction,
    ForecastPoint,
    ForecastSummary,
    ReorderRecommendation,
    ReportForecast,
    ReportRecommendation,
    ReportStats,
    SalesForecast,
    SlowMovingProduct,
    SlowMovingReport,
    StockDepletion,
)
from stockpulse.schemas.ledger import DemandPredictionRecord
from stockpulse.services.forecasting.business_report import BusinessReportService
from stockpulse.services.forecasting.dead_stock import DeadStockService
from stockpulse.services.forecasting.demand_predictor import DemandPredictionService
from stockpulse.services.forecasting.forecaster import ForecastService
from stockpulse.services.forecasting.reorder import ReorderService
from stockpulse.services.forecasting.stock_risk import StockRiskService
from stockpulse.services.ledger.base import LedgerStore


def _store(info: Info) -> LedgerStore:
    return info.context["store"]


def _to_prediction(record: DemandPredictionRecord) -> DemandPrediction:
    return DemandPrediction(
        id=str(record.id),
        product_id=str(record.product_id),
        product_name=record.product_name,
        predicted_demand=record.predicted_demand,
        suggested_restock=record.suggested_restock,
        risk_of_stockout=record.risk_of_stockout,
        period_start=record.period_start,
        period_end=record.period_end,
        generated_at=record.generated_at
    )


async def resolve_forecast_summary(info: Info) -> ForecastSummary:
    """Resolver for the forecastSummary field."""
    summary = await ForecastService.get_forecast_summary(_store(info))
    return ForecastSummary(**summary.model_dump())


async def resolve_sales_forecast(
    info: Info,
    range_key: Optional[str],
    start_date: Optional[str],
    end_date: Optional[str]
) -> SalesForecast:
    """Resolver for the salesForecast field."""
    series = await ForecastService.get_sales_forecast(_store(info), range_key, start_date, end_date)
    return SalesForecast(
        points=[ForecastPoint(**point.model_dump()) for point in series.points],
        historical_count=series.historical_count
    )


async def resolve_stock_depletion(info: Info) -> List[StockDepletion]:
    rows = await StockRiskService.get_stock_depletion(_store(info))
    return [
        StockDepletion(
            product_id=str(row.product_id),
            product_name=row.product_name,
            current_quantity=row.current_quantity,
            avg_daily_sales=row.avg_daily_sales,
            risk_level=row.risk_level,
            estimated_days_left=row.estimated_days_left
        )
        for row in rows
    ]


async def resolve_reorder_recommendations(info: Info) -> List[ReorderRecommendation]:
    recommendations = await ReorderService.get_reorder_recommendations(_store(info))
    return [
        ReorderRecommendation(
            product_id=str(item.product_id),
            product_name=item.product_name,
            suggested_quantity=item.suggested_quantity,
            timeframe=item.timeframe,
            reason=item.reason
        )
        for item in recommendations
    ]


async def resolve_slow_moving(info: Info, days: Optional[int]) -> SlowMovingReport:
    rows, window = await DeadStockService.get_slow_moving(_store(info), days)
    return SlowMovingReport(
        window_days=window,
        products=[
            SlowMovingProduct(
                product_id=str(row.product_id),
                product_name=row.product_name,
                days_since_last_sale=row.days_since_last_sale,
                current_quantity=row.current_quantity
            )
            for row in rows
        ]
    )


async def resolve_business_report(
    info: Info,
    start_date: Optional[str],
    end_date: Optional[str]
) -> BusinessReport:
    """Resolver for the businessReport field."""
    report = await BusinessReportService.build_business_report(_store(info), start_date, end_date)
    return BusinessReport(
        start_date=report.start_date,
        end_date=report.end_date,
        stats=ReportStats(**report.stats.model_dump()),
        insights=[
            BusinessInsight(
                title=insight.title,
                text=insight.text,
                impact=insight.impact,
                confidence=insight.confidence
            )
            for insight in report.insights
        ],
        forecast=ReportForecast(**report.forecast.model_dump()),
        recommendations=[
            ReportRecommendation(title=item.title, description=item.description)
            for item in report.recommendations
        ]
    )


async def resolve_latest_predictions(info: Info) -> List[DemandPrediction]:
    records = await DemandPredictionService.get_latest_predictions(_store(info))
    return [_to_prediction(record) for record in records]


async def resolve_run_demand_prediction(info: Info, days_ahead: int) -> List[DemandPrediction]:
    """Resolver for the runDemandPrediction mutation; notifies owners and admins."""
    if days_ahead < 1:
        raise ValueError("daysAhead must be a positive number of days")
    records = await DemandPredictionService.run_and_notify(_store(info), days_ahead)
    return [_to_prediction(record) for record in records]
