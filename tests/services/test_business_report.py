from datetime import date, datetime, timedelta, timezone

import pytest

from stockpulse.services.forecasting.business_report import BusinessReportService, resolve_report_window
from stockpulse.services.forecasting.dates import end_of_day
from stockpulse.services.forecasting.demand_predictor import DemandPredictionService


def test_default_window_and_prior_period(now):
    start, end, previous_start, previous_end = resolve_report_window(None, None, now)

    assert (start, end) == (now - timedelta(days=30), now)
    assert previous_start == now - timedelta(days=60)
    assert previous_end == start - timedelta(microseconds=1)


def test_explicit_window_covers_whole_end_day(now):
    start, end, previous_start, _ = resolve_report_window("2026-03-01", "2026-03-10", now)

    assert start == datetime(2026, 3, 1, tzinfo=timezone.utc)
    assert end == end_of_day(date(2026, 3, 10))
    assert end - start == start - previous_start


def test_inverted_or_malformed_start_uses_default(now):
    _, end, _, _ = resolve_report_window("2026-03-10", "2026-03-01", now)
    start, _, _, _ = resolve_report_window("2026-03-10", "2026-03-01", now)
    assert start == end - timedelta(days=30)

    start, end, _, _ = resolve_report_window("yesterday", None, now)
    assert (start, end) == (now - timedelta(days=30), now)


@pytest.mark.asyncio
async def test_empty_ledger_still_reports(store, now):
    report = await BusinessReportService.build_business_report(store, now=now)

    assert [i.title for i in report.insights] == ["Data Collection Phase"]
    assert report.insights[0].confidence == 50
    assert [r.title for r in report.recommendations] == ["Maintain Operations"]
    assert report.recommendations[0].description == "Run demand prediction weekly for updated insights"
    assert report.stats.days_of_inventory == 0
    assert report.stats.active_recommendations == 1


@pytest.mark.asyncio
async def test_stock_without_demand_uses_sentinel(store, now):
    store.add_product(1, "Tiles", 20)

    report = await BusinessReportService.build_business_report(store, now=now)

    assert report.stats.days_of_inventory == 999
    assert report.stats.avg_daily_demand == 0.0


@pytest.mark.asyncio
async def test_report_rules_fire_in_order(store, now):
    store.add_product(1, "Hammer", 5, unit_price=340.0, category="Tools")
    store.add_product(2, "Paint", 500, unit_price=100.0, category="Paint")
    store.add_sale(datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc), [(1, 30)])
    store.add_sale(datetime(2026, 3, 12, 9, 0, tzinfo=timezone.utc), [(2, 10)])
    await DemandPredictionService.run_demand_prediction(store, now=now)

    report = await BusinessReportService.build_business_report(store, now=now)

    assert [i.title for i in report.insights] == [
        "Rising Demand Detected",
        "Monthly Revenue Projection",
        "Overstock Alert",
        "Category Growth Opportunity",
        "Slow-Moving Inventory",
        "Optimal Reorder Window",
        "Stockout Risk",
    ]
    insights = {i.title: i for i in report.insights}
    assert "₱11,200.00" in insights["Monthly Revenue Projection"].text
    assert "+0.0%" in insights["Monthly Revenue Projection"].text
    assert insights["Category Growth Opportunity"].text.startswith("Tools is your top-performing category")
    assert "₱4,080.00" in insights["Optimal Reorder Window"].text
    assert "Hammer" in insights["Stockout Risk"].text

    assert report.stats.stock_value == 51700.0
    assert report.stats.avg_daily_demand == 1.33
    assert report.stats.days_of_inventory == 380
    assert report.stats.active_recommendations == len(report.insights)

    assert report.forecast.expected_sales_volume == 40
    assert report.forecast.projected_revenue == 11200.0
    assert report.forecast.reorder_requirements_count == 1

    assert [r.title for r in report.recommendations] == [
        "Expand High-Demand Categories",
        "Optimize Inventory Investment",
        "Implement Dynamic Pricing",
        "Prevent Stockouts",
    ]
    assert report.recommendations[-1].description == "Place urgent orders for 2 critical product(s)"


@pytest.mark.asyncio
async def test_changes_compare_with_prior_period(store, now):
    store.add_product(1, "Paint", 100, unit_price=100.0)
    store.add_sale(now - timedelta(days=5), [(1, 10)])
    store.add_sale(now - timedelta(days=40), [(1, 5)])

    report = await BusinessReportService.build_business_report(store, now=now)

    assert report.forecast.revenue_change_percent == 100.0
    assert report.forecast.sales_volume_change_percent == 100.0


@pytest.mark.asyncio
@pytest.mark.parametrize("days_ahead", [7, 30])
async def test_daily_demand_follows_prediction_horizon(store, now, days_ahead):
    store.add_product(1, "Hammer", 5, unit_price=340.0)
    store.add_product(2, "Paint", 100, unit_price=100.0)
    store.add_sale(now - timedelta(days=5), [(1, 30), (2, 30)])
    await DemandPredictionService.run_demand_prediction(store, days_ahead=days_ahead, now=now)

    report = await BusinessReportService.build_business_report(store, now=now)

    insights = {i.title: i for i in report.insights}
    assert "Overstock Alert" in insights
    assert insights["Overstock Alert"].text.startswith("1 product(s) have excess inventory. Paint has 100 units")
    assert "only require 1 units" in insights["Overstock Alert"].text
    assert f"Predicted {days_ahead}-day sales: {days_ahead} units." in insights["Rising Demand Detected"].text
