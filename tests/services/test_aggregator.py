from datetime import datetime, timedelta, timezone

import pytest

from stockpulse.schemas.ledger import SaleLineRecord, SaleRecord
from stockpulse.services.forecasting.aggregator import (
    daily_revenue,
    last_sale_by_product,
    trailing_units_sold,
    units_sold_by_product,
)


def _sale(sale_id, timestamp, total):
    return SaleRecord(id=sale_id, timestamp=timestamp, total=total)


def test_daily_revenue_zero_fills_every_day():
    """Every day in the range gets a point and totals land on their UTC day"""
    start = datetime(2026, 3, 1, tzinfo=timezone.utc)
    end = datetime(2026, 3, 5, 8, 0, tzinfo=timezone.utc)
    sales = [
        _sale(1, datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc), 10.0),
        _sale(2, datetime(2026, 3, 2, 18, 30, tzinfo=timezone.utc), 5.0),
        # Later the same day as ``end``: still inside the range
        _sale(3, datetime(2026, 3, 5, 23, 0, tzinfo=timezone.utc), 7.0),
        _sale(4, datetime(2026, 3, 6, 0, 0, tzinfo=timezone.utc), 100.0),
    ]

    points = daily_revenue(sales, start, end)

    assert [p.date.day for p in points] == [1, 2, 3, 4, 5]
    assert [p.revenue for p in points] == [0.0, 15.0, 0.0, 0.0, 7.0]
    assert sum(p.revenue for p in points) == 22.0


def test_daily_revenue_treats_naive_timestamps_as_utc():
    start = datetime(2026, 3, 1, tzinfo=timezone.utc)
    points = daily_revenue([_sale(1, datetime(2026, 3, 1, 23, 59), 4.5)], start, start)

    assert len(points) == 1
    assert points[0].revenue == 4.5


def test_units_and_last_sale_by_product():
    t1 = datetime(2026, 3, 1, tzinfo=timezone.utc)
    t2 = datetime(2026, 3, 4, tzinfo=timezone.utc)
    lines = [
        SaleLineRecord(product_id=1, quantity=2, sale_timestamp=t2),
        SaleLineRecord(product_id=1, quantity=3, sale_timestamp=t1),
        SaleLineRecord(product_id=2, quantity=1, sale_timestamp=t1),
    ]

    assert units_sold_by_product(lines) == {1: 5, 2: 1}
    assert last_sale_by_product(lines) == {1: t2, 2: t1}


@pytest.mark.asyncio
async def test_trailing_units_sold_ignores_sales_outside_window(store, now):
    store.add_product(1, "Hammer", 10)
    store.add_sale(now - timedelta(days=2), [(1, 4)])
    store.add_sale(now - timedelta(days=29), [(1, 1)])
    store.add_sale(now - timedelta(days=31), [(1, 50)])

    assert await trailing_units_sold(store, now, 30) == {1: 5}
