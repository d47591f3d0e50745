import asyncio

from stockpulse.tasks.async_helper import run_async


async def _current_loop():
    return asyncio.get_running_loop()


def test_run_async_reuses_worker_loop():
    first = run_async(_current_loop())
    second = run_async(_current_loop())

    assert first is second
    assert not first.is_running()


def test_run_async_replaces_closed_loop():
    closed = run_async(_current_loop())
    closed.close()

    replacement = run_async(_current_loop())

    assert replacement is not closed
    assert not replacement.is_closed()
