from datetime import timedelta

import pytest

from stockpulse.schemas.ledger import InventoryRecord, SaleLineRecord
from stockpulse.services.forecasting.dead_stock import DeadStockService, clamp_window_days, find_slow_moving


@pytest.mark.parametrize("requested, expected", [
    (None, 30),
    (0, 30),
    ("abc", 30),
    (3, 7),
    (200, 90),
    ("45", 45),
])
def test_window_is_clamped(requested, expected):
    assert clamp_window_days(requested) == expected


def test_slow_moving_products(now):
    inventory = [
        InventoryRecord(product_id=pid, product_name=name, quantity=qty)
        for pid, name, qty in [(1, "Hammer", 5), (2, "Paint", 12), (3, "Tiles", 40)]
    ]
    lines = [
        SaleLineRecord(product_id=1, quantity=1, sale_timestamp=now - timedelta(days=10)),
        SaleLineRecord(product_id=2, quantity=1, sale_timestamp=now - timedelta(days=40)),
        SaleLineRecord(product_id=2, quantity=1, sale_timestamp=now - timedelta(days=75)),
    ]

    rows = find_slow_moving(inventory, lines, 30, now)

    assert [(r.product_id, r.days_since_last_sale, r.current_quantity) for r in rows] == [
        (2, 40, 12),
        (3, 30, 40),
    ]


@pytest.mark.asyncio
async def test_slow_moving_service_reports_applied_window(store, now):
    store.add_product(1, "Hammer", 5)
    store.add_sale(now - timedelta(days=10), [(1, 1)])

    rows, window = await DeadStockService.get_slow_moving(store, days=5, now=now)

    assert window == 7
    assert [r.product_id for r in rows] == [1]
    assert rows[0].days_since_last_sale == 10
