from datetime import timedelta

import pytest

from stockpulse.schemas.ledger import UserRole
from stockpulse.services.forecasting.risk_alerts import (
    AlertTier,
    alert_message,
    compute_alert_tier,
    evaluate_risk_and_notify,
    notification_type,
    should_notify,
)


@pytest.mark.parametrize("quantity, avg_daily, reorder_quantity, expected", [
    (0, 5.0, 100, AlertTier.OUT_OF_STOCK),
    (150, 0.0, 100, AlertTier.OVERSTOCK),
    (20, 0.0, 100, AlertTier.NO_DATA),
    (50, 10.0, 100, AlertTier.CRITICAL),
    (69, 10.0, 100, AlertTier.CRITICAL),
    (100, 10.0, 100, AlertTier.LOW),
    (14, 1.0, 100, AlertTier.LOW),
    (15, 1.0, 100, AlertTier.SAFE),
])
def test_alert_tiers(quantity, avg_daily, reorder_quantity, expected):
    assert compute_alert_tier(quantity, avg_daily, reorder_quantity) == expected


@pytest.mark.parametrize("previous, current, expected", [
    (None, AlertTier.SAFE, False),
    (None, AlertTier.LOW, True),
    (AlertTier.LOW, AlertTier.LOW, False),
    (AlertTier.CRITICAL, AlertTier.OUT_OF_STOCK, True),
    (AlertTier.LOW, AlertTier.CRITICAL, True),
    (AlertTier.OUT_OF_STOCK, AlertTier.CRITICAL, False),
    (AlertTier.SAFE, AlertTier.LOW, True),
    (AlertTier.CRITICAL, AlertTier.LOW, False),
    (AlertTier.SAFE, AlertTier.OVERSTOCK, True),
    (AlertTier.SAFE, AlertTier.NO_DATA, True),
    (AlertTier.CRITICAL, AlertTier.SAFE, False),
])
def test_notify_only_on_reportable_changes(previous, current, expected):
    assert should_notify(previous, current) is expected


def test_notification_labels():
    assert notification_type(AlertTier.OUT_OF_STOCK) == "OutOfStock"
    assert notification_type(AlertTier.NO_DATA) == "NoData"
    assert alert_message("Hammer", AlertTier.OUT_OF_STOCK) == "Hammer is out of stock."
    assert alert_message("Hammer", AlertTier.CRITICAL) == "Hammer: less than 7 days of stock left."


@pytest.mark.asyncio
async def test_evaluation_notifies_once_per_change(staffed_store, now):
    store = staffed_store
    store.add_product(10, "Hammer", 0)
    store.add_product(11, "Tiles", 150)
    store.add_product(12, "Paint", 20)
    store.add_product(13, "Nails", 50)
    store.add_product(14, "Screws", 100)
    store.add_sale(now - timedelta(days=1), [(13, 300), (14, 90)])

    first = await evaluate_risk_and_notify(store, now=now)

    assert first == 4
    assert len(store.notifications) == 8
    assert {n["user_id"] for n in store.notifications} == {1, 2}
    assert store.snapshots == {10: "Out of Stock", 11: "Overstock", 12: "No Data", 13: "Critical", 14: "Safe"}
    hammer = next(n for n in store.notifications if n["product_id"] == 10)
    assert hammer["title"] == "Out of Stock: Hammer"
    assert hammer["risk_level"] == "Out of Stock"

    assert await evaluate_risk_and_notify(store, now=now) == 0

    store.products[14].quantity = 20
    assert await evaluate_risk_and_notify(store, now=now) == 1
    assert store.notifications[-1]["type"] == "Critical"
    assert store.snapshots[14] == "Critical"


@pytest.mark.asyncio
async def test_evaluation_without_recipients_still_records_tiers(store, now):
    store.add_user(7, UserRole.CASHIER, "cashier@example.com")
    store.add_product(1, "Hammer", 0)

    assert await evaluate_risk_and_notify(store, now=now) == 1
    assert store.notifications == []
    assert store.snapshots == {1: "Out of Stock"}
