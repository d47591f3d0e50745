import asyncio
import logging
from functools import wraps

from stockpulse.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)

_worker_loop = None


def run_async(coro):
    """
    Runs a coroutine on the worker's event loop, creating it on first use.

    Pooled database connections are bound to this loop, so it is reused
    across tasks and only replaced once closed.
    """
    global _worker_loop
    if _worker_loop is None or _worker_loop.is_closed():
        _worker_loop = asyncio.new_event_loop()
        asyncio.set_event_loop(_worker_loop)
    return _worker_loop.run_until_complete(coro)


def celery_async_task(bind=True, max_retries=3, default_retry_delay=60*5):
    """
    Decorator to define a Celery task that runs a coroutine with retry support.

    Usage:
        @celery_async_task()
        async def run_scheduled_risk_check(self):
            return await evaluate_risk_and_notify(get_ledger_store())
    """
    def decorator(async_func):
        task_decorator = celery_app.task(
            bind=bind,
            max_retries=max_retries,
            default_retry_delay=default_retry_delay,
        )

        @task_decorator
        @wraps(async_func)
        def wrapper(self, *args, **kwargs):
            try:
                return run_async(async_func(self, *args, **kwargs))
            except Exception as exc:
                logger.error(
                    f"Task {self.name} failed (attempt {self.request.retries + 1}): {exc}",
                    exc_info=True
                )
                raise self.retry(exc=exc)

        return wrapper

    return decorator
