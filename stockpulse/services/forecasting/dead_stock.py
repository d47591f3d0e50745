import asyncio
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

from stockpulse.core.config import get_settings
from stockpulse.schemas.forecast import SlowMovingRow
from stockpulse.schemas.ledger import InventoryRecord, SaleLineRecord
from stockpulse.services.forecasting.aggregator import last_sale_by_product
from stockpulse.services.forecasting.dates import as_utc, utc_now
from stockpulse.services.ledger.base import LedgerStore

settings = get_settings()


def clamp_window_days(days: Any) -> int:
    """Coerce a requested window into [SLOW_MOVING_MIN_DAYS, SLOW_MOVING_MAX_DAYS].

    Missing, zero or non-numeric input uses SLOW_MOVING_DEFAULT_DAYS.
    """
    try:
        requested = int(days)
    except (TypeError, ValueError):
        requested = 0
    if requested == 0:
        requested = settings.SLOW_MOVING_DEFAULT_DAYS
    return min(settings.SLOW_MOVING_MAX_DAYS, max(settings.SLOW_MOVING_MIN_DAYS, requested))


def find_slow_moving(
    inventory: Iterable[InventoryRecord],
    all_lines: Iterable[SaleLineRecord],
    window_days: int,
    now: datetime
) -> List[SlowMovingRow]:
    """Products with no sale line inside the trailing window.

    ``days_since_last_sale`` counts whole days since the product's most recent
    sale ever, or is the window size for products that never sold.
    """
    now = as_utc(now)
    since = now - timedelta(days=window_days)
    last_sale: Dict[int, datetime] = last_sale_by_product(all_lines)

    rows = []
    for record in inventory:
        last = last_sale.get(record.product_id)
        if last is not None and last >= since:
            continue
        days_since = (now - last).days if last is not None else window_days
        rows.append(SlowMovingRow(
            product_id=record.product_id,
            product_name=record.product_name,
            days_since_last_sale=days_since,
            current_quantity=record.quantity
        ))
    return rows


class DeadStockService:
    """Service for slow-moving and dead stock detection."""

    @staticmethod
    async def get_slow_moving(
        store: LedgerStore,
        days: Any = None,
        now: Optional[datetime] = None
    ) -> Tuple[List[SlowMovingRow], int]:
        """Slow-moving products and the window actually applied."""
        now = now or utc_now()
        window = clamp_window_days(days)

        inventory, all_lines = await asyncio.gather(
            store.list_inventory(),
            store.list_sale_lines(end=now)
        )
        return find_slow_moving(inventory, all_lines, window, now), window
