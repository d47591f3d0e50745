"""Moving-average demand prediction with an append-only snapshot log."""
import asyncio
import logging
import math
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from stockpulse.core.config import get_settings
from stockpulse.schemas.ledger import (
    DemandPredictionCreate,
    DemandPredictionRecord,
    InventoryRecord,
    StockoutRisk,
    UserRole,
)
from stockpulse.services.forecasting.aggregator import trailing_units_sold
from stockpulse.services.forecasting.dates import as_utc, utc_now
from stockpulse.services.ledger.base import LedgerStore

logger = logging.getLogger(__name__)
settings = get_settings()

ADMIN_ROLES = (UserRole.OWNER, UserRole.ADMIN)


def stockout_risk(current_stock: int, predicted_demand: float, threshold: int) -> StockoutRisk:
    if current_stock < threshold:
        return StockoutRisk.HIGH
    if current_stock < predicted_demand + threshold:
        return StockoutRisk.MEDIUM
    return StockoutRisk.LOW


def predict_demand(
    record: InventoryRecord,
    units_sold: int,
    days_ahead: int = settings.DEMAND_DAYS_AHEAD,
    window_days: int = settings.TRAILING_WINDOW_DAYS
) -> Tuple[float, int, StockoutRisk]:
    """Predicted demand, suggested restock and stockout risk for one product.

    Args:
        record: Product stock level
        units_sold: Units sold over the trailing window
        days_ahead: Prediction horizon in days
        window_days: Length of the trailing window

    Returns:
        Tuple of (predicted_demand, suggested_restock, risk)
    """
    avg_daily = units_sold / window_days
    predicted_demand = round(avg_daily * days_ahead, 2)

    threshold = record.low_stock_threshold
    if threshold is None:
        threshold = settings.DEFAULT_LOW_STOCK_THRESHOLD

    suggested_restock = max(0, math.ceil(predicted_demand + threshold - record.quantity))
    return predicted_demand, suggested_restock, stockout_risk(record.quantity, predicted_demand, threshold)


def build_predictions(
    inventory: Iterable[InventoryRecord],
    units_sold: Dict[int, int],
    now: datetime,
    days_ahead: int = settings.DEMAND_DAYS_AHEAD
) -> List[DemandPredictionCreate]:
    window = settings.TRAILING_WINDOW_DAYS
    period_start = now - timedelta(days=window)
    period_end = now + timedelta(days=days_ahead)

    predictions = []
    for record in inventory:
        predicted, restock, risk = predict_demand(record, units_sold.get(record.product_id, 0), days_ahead, window)
        predictions.append(DemandPredictionCreate(
            product_id=record.product_id,
            predicted_demand=predicted,
            suggested_restock=restock,
            risk_of_stockout=risk,
            period_start=period_start,
            period_end=period_end,
            generated_at=now
        ))
    return predictions


def latest_per_product(rows: Iterable[DemandPredictionRecord]) -> List[DemandPredictionRecord]:
    """Keep each product's newest snapshot (max generated_at, then max id), newest first."""
    latest: Dict[int, DemandPredictionRecord] = {}
    for row in rows:
        current = latest.get(row.product_id)
        if current is None or (as_utc(row.generated_at), row.id) > (as_utc(current.generated_at), current.id):
            latest[row.product_id] = row

    return sorted(latest.values(), key=lambda row: (as_utc(row.generated_at), row.id), reverse=True)


def forecast_notification_message(predictions: List[DemandPredictionRecord], scheduled: bool) -> str:
    high_risk = sum(1 for p in predictions if p.risk_of_stockout == StockoutRisk.HIGH)
    need_reorder = sum(1 for p in predictions if p.suggested_restock > 0)

    if high_risk > 0 or need_reorder > 0:
        return (
            f"Demand prediction run complete: {high_risk} item(s) at high risk of stockout, "
            f"{need_reorder} suggested for reorder. Check Reports or ask the Assistant: "
            f"\"What should I reorder?\" or \"Which items are low stock?\""
        )
    prefix = "Daily demand forecast completed." if scheduled else "Demand forecast updated."
    return (
        f"{prefix} No reorder needed right now. "
        f"Ask the Assistant for \"Demand forecast\" or \"Sales forecast\" anytime."
    )


class DemandPredictionService:
    """Service for running and reading demand prediction snapshots."""

    @staticmethod
    async def run_demand_prediction(
        store: LedgerStore,
        days_ahead: int = settings.DEMAND_DAYS_AHEAD,
        now: Optional[datetime] = None
    ) -> List[DemandPredictionRecord]:
        """Predict demand for every product and append one snapshot per product.

        Snapshots are written one at a time; a failure part-way leaves the
        earlier products with a new snapshot and propagates the error.
        """
        now = as_utc(now) if now else utc_now()
        inventory, units_sold = await asyncio.gather(
            store.list_inventory(),
            trailing_units_sold(store, now, settings.TRAILING_WINDOW_DAYS)
        )
        names = {record.product_id: record.product_name for record in inventory}

        records = []
        for prediction in build_predictions(inventory, units_sold, now, days_ahead):
            try:
                record = await store.create_demand_prediction(prediction)
            except Exception as e:
                logger.error(
                    f"Failed to store demand prediction for product {prediction.product_id} "
                    f"after {len(records)} snapshot(s): {e}",
                    exc_info=True
                )
                raise
            record.product_name = record.product_name or names.get(record.product_id)
            records.append(record)

        logger.info(f"Stored {len(records)} demand prediction snapshot(s) for {days_ahead} days ahead")
        return records

    @staticmethod
    async def get_latest_predictions(store: LedgerStore) -> List[DemandPredictionRecord]:
        rows = await store.list_demand_predictions(limit=settings.PREDICTION_FETCH_LIMIT)
        return latest_per_product(rows)

    @staticmethod
    async def run_and_notify(
        store: LedgerStore,
        days_ahead: int = settings.DEMAND_DAYS_AHEAD,
        scheduled: bool = False,
        now: Optional[datetime] = None
    ) -> List[DemandPredictionRecord]:
        """Run a prediction and tell owners and admins what it found."""
        predictions = await DemandPredictionService.run_demand_prediction(store, days_ahead, now)

        title = "Daily demand forecast" if scheduled else "Demand forecast updated"
        await store.create_notification_for_roles(
            ADMIN_ROLES,
            title,
            forecast_notification_message(predictions, scheduled),
            "DEMAND_FORECAST"
        )
        return predictions
