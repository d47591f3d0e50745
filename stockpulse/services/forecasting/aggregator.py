"""Collapse the sales ledger into numeric series."""
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Dict, Iterable, List

from stockpulse.schemas.forecast import DailyRevenuePoint
from stockpulse.schemas.ledger import SaleLineRecord, SaleRecord
from stockpulse.services.forecasting.dates import as_utc, end_of_day, iter_days, start_of_day
from stockpulse.services.ledger.base import LedgerStore


def daily_revenue(sales: Iterable[SaleRecord], start: datetime, end: datetime) -> List[DailyRevenuePoint]:
    """Sum sale totals per UTC calendar day over [start, end].

    The end bound is inclusive of its whole day. Every day in the range gets
    a point, zero-filled when nothing sold, in ascending date order.

    Args:
        sales: Sales to aggregate; those outside the range are ignored
        start: First day of the range
        end: Last day of the range

    Returns:
        List of DailyRevenuePoint, one per calendar day
    """
    range_start = start_of_day(start)
    range_end = end_of_day(end)

    revenue_by_day: Dict = defaultdict(float)
    for sale in sales:
        timestamp = as_utc(sale.timestamp)
        if range_start <= timestamp <= range_end:
            revenue_by_day[timestamp.date()] += sale.total

    return [
        DailyRevenuePoint(date=day, revenue=revenue_by_day.get(day, 0.0))
        for day in iter_days(range_start.date(), range_end.date())
    ]


def units_sold_by_product(lines: Iterable[SaleLineRecord]) -> Dict[int, int]:
    """Sum sold quantity per product id."""
    sold: Dict[int, int] = defaultdict(int)
    for line in lines:
        sold[line.product_id] += line.quantity
    return dict(sold)


def last_sale_by_product(lines: Iterable[SaleLineRecord]) -> Dict[int, datetime]:
    """Most recent sale timestamp per product id."""
    latest: Dict[int, datetime] = {}
    for line in lines:
        timestamp = as_utc(line.sale_timestamp)
        existing = latest.get(line.product_id)
        if existing is None or timestamp > existing:
            latest[line.product_id] = timestamp
    return latest


async def trailing_units_sold(store: LedgerStore, now: datetime, window_days: int) -> Dict[int, int]:
    """Units sold per product over the ``window_days`` ending at ``now``."""
    lines = await store.list_sale_lines(start=now - timedelta(days=window_days), end=now)
    return units_sold_by_product(lines)
