"""Stock depletion estimates and risk tiers."""
import asyncio
import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from stockpulse.core.config import get_settings
from stockpulse.schemas.forecast import RiskLevel, StockDepletionRow
from stockpulse.schemas.ledger import InventoryRecord
from stockpulse.services.forecasting.aggregator import trailing_units_sold
from stockpulse.services.forecasting.dates import utc_now
from stockpulse.services.ledger.base import LedgerStore

logger = logging.getLogger(__name__)
settings = get_settings()


def average_daily_sales(units_sold: float, window_days: int = settings.TRAILING_WINDOW_DAYS) -> float:
    if window_days <= 0:
        return 0.0
    return units_sold / window_days


def estimate_days_left(quantity: int, avg_daily_sales: float) -> Optional[float]:
    """Days until stock runs out at the current sales rate.

    Returns None when there is stock but no sales to estimate from, and 0.0
    when nothing is left to sell.
    """
    if avg_daily_sales > 0:
        return quantity / avg_daily_sales
    if quantity > 0:
        return None
    return 0.0


def classify_risk(
    quantity: int,
    days_left: Optional[float],
    critical_days: int = settings.CRITICAL_DAYS_LEFT,
    low_days: int = settings.LOW_DAYS_LEFT
) -> RiskLevel:
    """Assign a risk tier; the first matching rule wins.

    A product with stock but no sales in the window (``days_left`` None) is
    Safe here. The alert monitor in ``risk_alerts`` reports it as "No Data".
    """
    if quantity <= 0:
        return RiskLevel.CRITICAL
    if days_left is None:
        return RiskLevel.SAFE
    if days_left < critical_days:
        return RiskLevel.CRITICAL
    if days_left < low_days:
        return RiskLevel.LOW
    return RiskLevel.SAFE


def build_stock_depletion(
    inventory: Iterable[InventoryRecord],
    units_sold: Dict[int, int],
    window_days: int = settings.TRAILING_WINDOW_DAYS
) -> List[StockDepletionRow]:
    """One depletion row per product, most urgent first and no-data rows last."""
    rows = []
    for record in inventory:
        avg_daily = average_daily_sales(units_sold.get(record.product_id, 0), window_days)
        days_left = estimate_days_left(record.quantity, avg_daily)
        rows.append(StockDepletionRow(
            product_id=record.product_id,
            product_name=record.product_name,
            current_quantity=record.quantity,
            avg_daily_sales=round(avg_daily, 2),
            estimated_days_left=round(days_left, 1) if days_left is not None else None,
            risk_level=classify_risk(record.quantity, days_left)
        ))

    rows.sort(key=lambda row: (row.estimated_days_left is None, row.estimated_days_left or 0))
    return rows


class StockRiskService:
    """Service for the per-product stock depletion table."""

    @staticmethod
    async def get_stock_depletion(store: LedgerStore, now: Optional[datetime] = None) -> List[StockDepletionRow]:
        now = now or utc_now()
        window = settings.TRAILING_WINDOW_DAYS

        inventory, units_sold = await asyncio.gather(
            store.list_inventory(),
            trailing_units_sold(store, now, window)
        )

        rows = build_stock_depletion(inventory, units_sold, window)
        critical = sum(1 for row in rows if row.risk_level == RiskLevel.CRITICAL)
        logger.info(f"Stock depletion computed for {len(rows)} products ({critical} critical)")
        return rows
