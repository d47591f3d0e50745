import asyncio
import logging
import math
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from stockpulse.core.config import get_settings
from stockpulse.schemas.forecast import ReorderRecommendation, ReorderTimeframe
from stockpulse.schemas.ledger import InventoryRecord
from stockpulse.services.forecasting.aggregator import trailing_units_sold
from stockpulse.services.forecasting.dates import utc_now
from stockpulse.services.forecasting.stock_risk import average_daily_sales, estimate_days_left
from stockpulse.services.ledger.base import LedgerStore

logger = logging.getLogger(__name__)
settings = get_settings()


def suggested_reorder_quantity(
    avg_daily_sales: float,
    reorder_quantity: int,
    lead_days: int = settings.LEAD_TIME_DAYS,
    buffer_days: int = settings.REORDER_BUFFER_DAYS
) -> int:
    """Cover the lead time plus a buffer, never below the configured reorder quantity."""
    covering = math.ceil(avg_daily_sales * (lead_days + buffer_days))
    return max(covering, reorder_quantity)


def reorder_timeframe(quantity: int, days_left: Optional[float]) -> ReorderTimeframe:
    if quantity <= 0 or (days_left is not None and days_left < 0):
        return ReorderTimeframe.IMMEDIATELY
    if days_left is not None and days_left < settings.CRITICAL_DAYS_LEFT:
        return ReorderTimeframe.WITHIN_3_DAYS
    return ReorderTimeframe.WITHIN_1_WEEK


def reorder_reason(avg_daily_sales: float, days_left: Optional[float]) -> str:
    if avg_daily_sales > 0 and days_left is not None:
        lasting = max(0.0, days_left)
        return f"Sales velocity: {avg_daily_sales:.1f} units/day. Stock lasting {lasting:.0f} days."
    return "Low/no recent sales; reorder to meet reorder level."


def recommend_reorder(
    record: InventoryRecord,
    units_sold: int,
    window_days: int = settings.TRAILING_WINDOW_DAYS
) -> Optional[ReorderRecommendation]:
    """Reorder advice for one product, or None when it has at least LOW_DAYS_LEFT of cover."""
    avg_daily = average_daily_sales(units_sold, window_days)
    days_left = estimate_days_left(record.quantity, avg_daily)

    if record.quantity > 0 and (days_left is None or days_left >= settings.LOW_DAYS_LEFT):
        return None

    return ReorderRecommendation(
        product_id=record.product_id,
        product_name=record.product_name,
        suggested_quantity=suggested_reorder_quantity(avg_daily, record.reorder_quantity),
        timeframe=reorder_timeframe(record.quantity, days_left),
        reason=reorder_reason(avg_daily, days_left)
    )


def build_reorder_recommendations(
    inventory: Iterable[InventoryRecord],
    units_sold: Dict[int, int],
    window_days: int = settings.TRAILING_WINDOW_DAYS
) -> List[ReorderRecommendation]:
    recommendations = []
    for record in inventory:
        recommendation = recommend_reorder(record, units_sold.get(record.product_id, 0), window_days)
        if recommendation is not None:
            recommendations.append(recommendation)
    return recommendations


class ReorderService:
    """Service for reorder recommendations on at-risk products."""

    @staticmethod
    async def get_reorder_recommendations(
        store: LedgerStore,
        now: Optional[datetime] = None
    ) -> List[ReorderRecommendation]:
        now = now or utc_now()
        inventory, units_sold = await asyncio.gather(
            store.list_inventory(),
            trailing_units_sold(store, now, settings.TRAILING_WINDOW_DAYS)
        )

        recommendations = build_reorder_recommendations(inventory, units_sold)
        logger.info(f"{len(recommendations)} of {len(inventory)} products need reordering")
        return recommendations
