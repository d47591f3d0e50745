from celery import Celery
from celery.schedules import crontab

from stockpulse.core.config import get_settings

settings = get_settings()

# Create Celery instance
celery_app = Celery(
    'stockpulse',
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=['stockpulse.tasks.forecast_tasks']
)

# Celery configuration
celery_app.conf.update(
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    timezone='UTC',
    enable_utc=True,
)

# Configure Celery Beat schedule
celery_app.conf.beat_schedule = {
    'daily-demand-prediction': {
        'task': 'stockpulse.tasks.forecast_tasks.run_scheduled_demand_prediction',
        'schedule': crontab(hour=settings.DEMAND_PREDICTION_HOUR, minute=0),
    },
    'stock-risk-check': {
        'task': 'stockpulse.tasks.forecast_tasks.run_scheduled_risk_check',
        'schedule': crontab(minute=f'*/{settings.RISK_CHECK_INTERVAL_MINUTES}'),
    },
}

if __name__ == '__main__':
    celery_app.start()
