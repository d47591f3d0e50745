"""Risk-change monitor: notify owners and admins when a product's stock tier moves."""
import asyncio
import logging
import math
from datetime import datetime
from enum import Enum
from typing import Optional

from stockpulse.core.config import get_settings
from stockpulse.services.forecasting.aggregator import trailing_units_sold
from stockpulse.services.forecasting.dates import utc_now
from stockpulse.services.forecasting.demand_predictor import ADMIN_ROLES
from stockpulse.services.forecasting.stock_risk import average_daily_sales
from stockpulse.services.ledger.base import LedgerStore

logger = logging.getLogger(__name__)
settings = get_settings()


class AlertTier(str, Enum):
    OUT_OF_STOCK = "Out of Stock"
    OVERSTOCK = "Overstock"
    NO_DATA = "No Data"
    CRITICAL = "Critical"
    LOW = "Low"
    SAFE = "Safe"


NOTIFICATION_TYPES = {
    AlertTier.OUT_OF_STOCK: "OutOfStock",
    AlertTier.OVERSTOCK: "Overstock",
    AlertTier.NO_DATA: "NoData",
    AlertTier.CRITICAL: "Critical",
    AlertTier.LOW: "Low",
    AlertTier.SAFE: "Safe",
}


def compute_alert_tier(quantity: int, avg_daily_units: float, reorder_quantity: int) -> AlertTier:
    """Alert tier for one product; the first matching rule wins.

    Unlike ``classify_risk``, stock with no recent sales is reported as
    NO_DATA and stock above the reorder quantity as OVERSTOCK.
    """
    if quantity <= 0:
        return AlertTier.OUT_OF_STOCK
    if quantity > reorder_quantity:
        return AlertTier.OVERSTOCK
    if avg_daily_units <= 0:
        return AlertTier.NO_DATA

    days_left = math.floor(quantity / avg_daily_units)
    if days_left < settings.CRITICAL_DAYS_LEFT:
        return AlertTier.CRITICAL
    if days_left <= settings.LOW_DAYS_LEFT:
        return AlertTier.LOW
    return AlertTier.SAFE


def should_notify(previous: Optional[AlertTier], current: AlertTier) -> bool:
    if previous == current:
        return False
    if previous is None:
        return current != AlertTier.SAFE
    if current in (AlertTier.OUT_OF_STOCK, AlertTier.OVERSTOCK, AlertTier.NO_DATA):
        return True
    if current == AlertTier.CRITICAL:
        return previous in (AlertTier.SAFE, AlertTier.LOW)
    if current == AlertTier.LOW:
        return previous == AlertTier.SAFE
    return False


def notification_type(tier: AlertTier) -> str:
    return NOTIFICATION_TYPES[tier]


def alert_message(product_name: str, tier: AlertTier) -> str:
    if tier == AlertTier.OUT_OF_STOCK:
        return f"{product_name} is out of stock."
    if tier == AlertTier.CRITICAL:
        return f"{product_name}: less than {settings.CRITICAL_DAYS_LEFT} days of stock left."
    if tier == AlertTier.LOW:
        return f"{product_name}: low stock ({settings.CRITICAL_DAYS_LEFT}-{settings.LOW_DAYS_LEFT} days)."
    if tier == AlertTier.OVERSTOCK:
        return f"{product_name} is overstocked."
    if tier == AlertTier.NO_DATA:
        return f"{product_name}: no sales in {settings.TRAILING_WINDOW_DAYS}+ days."
    return f"{product_name}: {tier.value}."


def _parse_tier(value: Optional[str]) -> Optional[AlertTier]:
    if value is None:
        return None
    try:
        return AlertTier(value)
    except ValueError:
        logger.warning(f"Ignoring unknown stored risk level '{value}'")
        return None


async def evaluate_risk_and_notify(store: LedgerStore, now: Optional[datetime] = None) -> int:
    """Evaluate every product, notify on reportable tier changes and record the new tier.

    Args:
        store: Ledger store
        now: Reference instant (defaults to the current UTC time)

    Returns:
        Number of products whose tier change was notified
    """
    now = now or utc_now()
    window = settings.TRAILING_WINDOW_DAYS

    inventory, units_sold = await asyncio.gather(
        store.list_inventory(),
        trailing_units_sold(store, now, window)
    )

    notified = 0
    for record in inventory:
        avg_daily = average_daily_sales(units_sold.get(record.product_id, 0), window)
        current = compute_alert_tier(record.quantity, avg_daily, record.reorder_quantity)
        previous = _parse_tier(await store.get_risk_snapshot(record.product_id))

        if should_notify(previous, current):
            await store.create_notification_for_roles(
                ADMIN_ROLES,
                f"{current.value}: {record.product_name}",
                alert_message(record.product_name, current),
                notification_type(current),
                product_id=record.product_id,
                risk_level=current.value
            )
            notified += 1

        await store.upsert_risk_snapshot(record.product_id, current.value)

    logger.info(f"Risk check evaluated {len(inventory)} products, {notified} tier change(s) notified")
    return notified
