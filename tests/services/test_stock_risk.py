from datetime import timedelta

import pytest

from stockpulse.schemas.forecast import RiskLevel
from stockpulse.schemas.ledger import InventoryRecord
from stockpulse.services.forecasting.risk_alerts import AlertTier, compute_alert_tier
from stockpulse.services.forecasting.stock_risk import (
    StockRiskService,
    average_daily_sales,
    build_stock_depletion,
    classify_risk,
    estimate_days_left,
)


def _record(product_id, quantity):
    return InventoryRecord(product_id=product_id, product_name=f"P{product_id}", quantity=quantity)


@pytest.mark.parametrize("quantity, avg_daily, expected_days, expected_risk", [
    (0, 0.0, 0.0, RiskLevel.CRITICAL),
    (0, 4.0, 0.0, RiskLevel.CRITICAL),
    (50, 10.0, 5.0, RiskLevel.CRITICAL),
    (50, 5.0, 10.0, RiskLevel.LOW),
    (50, 3.0, 50 / 3, RiskLevel.SAFE),
])
def test_risk_tiers(quantity, avg_daily, expected_days, expected_risk):
    days_left = estimate_days_left(quantity, avg_daily)

    assert days_left == pytest.approx(expected_days)
    assert classify_risk(quantity, days_left) == expected_risk


def test_stock_without_sales_is_safe_with_unknown_days():
    days_left = estimate_days_left(20, 0.0)

    assert days_left is None
    assert classify_risk(20, days_left) == RiskLevel.SAFE


def test_stock_without_sales_is_no_data_for_alerts():
    # The alert monitor flags the same product instead of calling it safe
    assert compute_alert_tier(20, 0.0, 100) == AlertTier.NO_DATA


def test_average_daily_sales_guards_empty_window():
    assert average_daily_sales(30, 30) == 1.0
    assert average_daily_sales(30, 0) == 0.0


def test_depletion_rows_sorted_with_unknown_last():
    inventory = [_record(1, 50), _record(2, 20), _record(3, 50), _record(4, 0)]
    units_sold = {1: 90, 3: 300}

    rows = build_stock_depletion(inventory, units_sold, 30)

    assert [row.product_id for row in rows] == [4, 3, 1, 2]
    assert rows[1].estimated_days_left == 5.0
    assert rows[2].estimated_days_left == 16.7
    assert rows[2].avg_daily_sales == 3.0
    assert rows[3].estimated_days_left is None
    assert rows[3].risk_level == RiskLevel.SAFE


@pytest.mark.asyncio
async def test_stock_depletion_service(store, now):
    store.add_product(1, "Hammer", 50)
    store.add_product(2, "Paint", 40)
    store.add_sale(now - timedelta(days=3), [(1, 300)])

    rows = await StockRiskService.get_stock_depletion(store, now=now)

    hammer = next(row for row in rows if row.product_id == 1)
    assert hammer.avg_daily_sales == 10.0
    assert hammer.estimated_days_left == 5.0
    assert hammer.risk_level == RiskLevel.CRITICAL
    assert rows[-1].product_id == 2
