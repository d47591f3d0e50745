from datetime import timedelta

import pytest

from stockpulse.api.graphql.schema import schema
from stockpulse.core.auth import CurrentCaller
from stockpulse.schemas.ledger import UserRole
from stockpulse.services.forecasting.dates import utc_now


def _context(store, role, user_id=None):
    return {"request": None, "store": store, "caller": CurrentCaller(id=user_id, role=role)}


@pytest.fixture
def stocked_store(staffed_store):
    # Resolvers read the wall clock, so sales are placed relative to it
    staffed_store.add_product(1, "Hammer", 50, unit_price=340.0)
    staffed_store.add_product(2, "Paint", 0, unit_price=100.0)
    staffed_store.add_sale(utc_now() - timedelta(days=1), [(1, 300)])
    return staffed_store


@pytest.mark.asyncio
async def test_stock_depletion_for_owner(stocked_store):
    result = await schema.execute(
        "{ stockDepletion { productName riskLevel estimatedDaysLeft } }",
        context_value=_context(stocked_store, UserRole.OWNER),
    )

    assert result.errors is None
    rows = result.data["stockDepletion"]
    assert [row["productName"] for row in rows] == ["Paint", "Hammer"]
    assert all(row["riskLevel"] == "CRITICAL" for row in rows)


@pytest.mark.asyncio
async def test_analytics_rejected_for_cashier(stocked_store):
    result = await schema.execute(
        "{ forecastSummary { predictedStockOutCount } }",
        context_value=_context(stocked_store, UserRole.CASHIER),
    )

    assert result.errors
    assert result.errors[0].message == "Only owners and admins can access forecasting analytics"


@pytest.mark.asyncio
async def test_slow_moving_reports_clamped_window(stocked_store):
    result = await schema.execute(
        "{ slowMoving(days: 500) { windowDays products { productName daysSinceLastSale } } }",
        context_value=_context(stocked_store, UserRole.ADMIN),
    )

    assert result.errors is None
    assert result.data["slowMoving"]["windowDays"] == 90
    assert result.data["slowMoving"]["products"] == [{"productName": "Paint", "daysSinceLastSale": 90}]


@pytest.mark.asyncio
async def test_run_demand_prediction_notifies_admins(stocked_store):
    result = await schema.execute(
        "mutation { runDemandPrediction(daysAhead: 7) { productName suggestedRestock riskOfStockout } }",
        context_value=_context(stocked_store, UserRole.ADMIN, user_id=2),
    )

    assert result.errors is None
    assert len(result.data["runDemandPrediction"]) == 2
    assert {n["title"] for n in stocked_store.notifications} == {"Demand forecast updated"}

    latest = await schema.execute(
        "{ latestPredictions { productName } }",
        context_value=_context(stocked_store, UserRole.OWNER),
    )
    assert sorted(row["productName"] for row in latest.data["latestPredictions"]) == ["Hammer", "Paint"]


@pytest.mark.asyncio
async def test_chat_is_open_to_every_role(stocked_store):
    result = await schema.execute(
        'mutation { chat(message: "Price of Hammer") }',
        context_value=_context(stocked_store, UserRole.CASHIER, user_id=3),
    )

    assert result.errors is None
    assert result.data["chat"] == "Hammer – ₱340.00"
