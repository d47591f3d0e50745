from .base import LedgerStore


def get_ledger_store() -> LedgerStore:
    """
    Get the database-backed ledger store bound to the application session factory.

    Returns:
        An instance of LedgerStore
    """
    from stockpulse.db.base import AsyncSessionLocal
    from .sql import SqlLedgerStore

    return SqlLedgerStore(AsyncSessionLocal)

__all__ = ['LedgerStore', 'get_ledger_store']
