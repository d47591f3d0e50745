import logging

from stockpulse.services.forecasting.demand_predictor import DemandPredictionService
from stockpulse.services.forecasting.risk_alerts import evaluate_risk_and_notify
from stockpulse.services.ledger import get_ledger_store
from stockpulse.tasks.async_helper import celery_async_task

logger = logging.getLogger(__name__)


@celery_async_task()
async def run_scheduled_demand_prediction(self):
    """Daily demand prediction run followed by the owner/admin summary notification."""
    predictions = await DemandPredictionService.run_and_notify(get_ledger_store(), scheduled=True)
    logger.info(f"Scheduled demand prediction stored {len(predictions)} snapshot(s)")
    return len(predictions)


@celery_async_task()
async def run_scheduled_risk_check(self):
    return await evaluate_risk_and_notify(get_ledger_store())
