"""Average-plus-trend revenue projection."""
import asyncio
import logging
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from stockpulse.core.config import get_settings
from stockpulse.schemas.forecast import DailyRevenuePoint, ForecastPoint, ForecastSeries, ForecastSummary
from stockpulse.schemas.ledger import InventoryRecord
from stockpulse.services.forecasting.aggregator import daily_revenue, trailing_units_sold
from stockpulse.services.forecasting.dates import end_of_day, parse_date, utc_now
from stockpulse.services.forecasting.stock_risk import average_daily_sales, estimate_days_left
from stockpulse.services.forecasting.trend import linear_trend
from stockpulse.services.ledger.base import LedgerStore

logger = logging.getLogger(__name__)
settings = get_settings()

SUMMARY_HISTORY_DAYS = 60


def daily_projections(values: Sequence[float], horizon_days: int) -> List[float]:
    """Project ``horizon_days`` values past the end of ``values``.

    Day i is avg + trend * (len(values) + i), floored at zero. An empty
    history projects zeros.
    """
    if not values:
        return [0.0] * horizon_days
    n = len(values)
    avg = sum(values) / n
    trend = linear_trend(values)
    return [max(0.0, avg + trend * (n + i)) for i in range(horizon_days)]


def forecast_total(values: Sequence[float], horizon_days: int) -> float:
    """Sum of the daily projections for the next ``horizon_days``."""
    return sum(daily_projections(values, horizon_days))


def forecast_series(values: Sequence[float], last_date: date, horizon_days: int) -> List[ForecastPoint]:
    """Projected points for the ``horizon_days`` following ``last_date``."""
    return [
        ForecastPoint(date=last_date + timedelta(days=i + 1), revenue=revenue, is_forecast=True)
        for i, revenue in enumerate(daily_projections(values, horizon_days))
    ]


def combined_forecast_series(history: List[DailyRevenuePoint], last_date: date, horizon_days: int) -> ForecastSeries:
    """Historical points followed by their projection, one point per day."""
    if history:
        last_date = history[-1].date
    values = [point.revenue for point in history]

    points = [ForecastPoint(date=point.date, revenue=point.revenue, is_forecast=False) for point in history]
    points.extend(forecast_series(values, last_date, horizon_days))
    return ForecastSeries(points=points, historical_count=len(history))


def growth_percentage(forecast: float, previous_actual: float) -> float:
    if previous_actual > 0:
        return (forecast - previous_actual) / previous_actual * 100
    return 100.0 if forecast > 0 else 0.0


def count_predicted_stockouts(
    inventory: Iterable[InventoryRecord],
    units_sold: Dict[int, int],
    window_days: int = settings.TRAILING_WINDOW_DAYS,
    lead_days: int = settings.LEAD_TIME_DAYS
) -> int:
    """Products already out of stock or expected to run out within the lead time."""
    count = 0
    for record in inventory:
        if record.quantity == 0:
            count += 1
            continue
        days_left = estimate_days_left(
            record.quantity, average_daily_sales(units_sold.get(record.product_id, 0), window_days)
        )
        if days_left is not None and days_left < lead_days:
            count += 1
    return count


def build_forecast_summary(
    daily: List[DailyRevenuePoint],
    inventory: Iterable[InventoryRecord],
    units_sold: Dict[int, int]
) -> ForecastSummary:
    """Summarize the next 7 and 30 days from the trailing 30 days of revenue.

    Growth compares the 30-day forecast with the actual revenue of the 30
    days before the trailing window.
    """
    window = settings.TRAILING_WINDOW_DAYS
    values = [point.revenue for point in daily]
    recent = values[-window:]
    previous = values[-2 * window:-window]

    predicted_7d = forecast_total(recent, 7)
    predicted_30d = forecast_total(recent, 30)
    previous_revenue = sum(previous)

    return ForecastSummary(
        predicted_revenue_7d=round(predicted_7d, 2),
        predicted_revenue_30d=round(predicted_30d, 2),
        predicted_sales_growth_pct=round(growth_percentage(predicted_30d, previous_revenue), 1),
        predicted_stock_out_count=count_predicted_stockouts(inventory, units_sold, window),
        previous_period_revenue=round(previous_revenue, 2)
    )


def resolve_forecast_window(
    range_key: Optional[str],
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    now: Optional[datetime] = None
) -> Tuple[datetime, datetime]:
    """Translate a chart range selector ("30", "90" or "custom") into [start, end].

    Custom ranges never extend past ``now``; malformed or inverted custom
    dates fall back to the trailing 30 days.
    """
    now = now or utc_now()
    default_start = now - timedelta(days=settings.TRAILING_WINDOW_DAYS)

    if range_key == "90":
        return now - timedelta(days=90), now

    if range_key == "custom":
        start = parse_date(start_date, default_start)
        end = parse_date(end_date, now)
        if end_date and end.time() == datetime.min.time():
            end = end_of_day(end)
        end = min(end, now)
        if start > end:
            logger.warning(f"Inverted forecast range {start_date}..{end_date}, using the trailing window")
            return default_start, now
        return start, end

    return default_start, now


class ForecastService:
    """Service for revenue forecasts built from the sales ledger."""

    @staticmethod
    async def get_forecast_summary(store: LedgerStore, now: Optional[datetime] = None) -> ForecastSummary:
        """Forecast summary: 7d/30d revenue, growth %, predicted stock-out count.

        Args:
            store: Ledger store
            now: Reference instant (defaults to the current UTC time)

        Returns:
            ForecastSummary
        """
        now = now or utc_now()
        start = now - timedelta(days=SUMMARY_HISTORY_DAYS)

        sales, inventory, units_sold = await asyncio.gather(
            store.list_sales(start, end_of_day(now)),
            store.list_inventory(),
            trailing_units_sold(store, now, settings.TRAILING_WINDOW_DAYS)
        )

        daily = daily_revenue(sales, start, now)
        return build_forecast_summary(daily, inventory, units_sold)

    @staticmethod
    async def get_sales_forecast(
        store: LedgerStore,
        range_key: Optional[str] = "30",
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> ForecastSeries:
        """Historical daily revenue plus a FORECAST_HORIZON_DAYS projection for charting.

        Args:
            store: Ledger store
            range_key: "30", "90" or "custom"
            start_date: ISO start date, used with "custom"
            end_date: ISO end date, used with "custom"
            now: Reference instant (defaults to the current UTC time)

        Returns:
            ForecastSeries with historical points first
        """
        start, end = resolve_forecast_window(range_key, start_date, end_date, now)

        sales = await store.list_sales(start, end_of_day(end))
        history = daily_revenue(sales, start, end)

        return combined_forecast_series(history, end.date(), settings.FORECAST_HORIZON_DAYS)
