from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, List, Optional

from stockpulse.schemas.ledger import (
    DemandPredictionCreate,
    DemandPredictionRecord,
    InventoryRecord,
    OrderRecord,
    SaleLineRecord,
    SaleRecord,
    UserRecord,
    UserRole,
)


class LedgerStore(ABC):
    """Abstract base class for the sales ledger and inventory store the engine reads from.

    Implementations must be safe to call concurrently: the engine issues
    independent reads together with ``asyncio.gather``.
    """

    @abstractmethod
    async def list_sales(self, start: datetime, end: datetime) -> List[SaleRecord]:
        """List completed sales whose timestamp falls within [start, end]."""
        pass

    @abstractmethod
    async def list_sale_lines(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        product_ids: Optional[Iterable[int]] = None
    ) -> List[SaleLineRecord]:
        """
        List sale lines joined with their parent sale's timestamp.

        Args:
            start: Lower bound of the sale timestamp (None = since the first sale)
            end: Upper bound of the sale timestamp (None = up to now)
            product_ids: Restrict to these products

        Returns:
            List of SaleLineRecord
        """
        pass

    @abstractmethod
    async def list_inventory(self) -> List[InventoryRecord]:
        """List every product together with its stock level."""
        pass

    @abstractmethod
    async def search_inventory(self, name_query: str, limit: int = 5) -> List[InventoryRecord]:
        """Case-insensitive substring search over product names."""
        pass

    @abstractmethod
    async def create_demand_prediction(self, prediction: DemandPredictionCreate) -> DemandPredictionRecord:
        """Append one demand prediction snapshot."""
        pass

    @abstractmethod
    async def list_demand_predictions(self, limit: int = 1000) -> List[DemandPredictionRecord]:
        """List prediction snapshots, newest first."""
        pass

    @abstractmethod
    async def create_notification_for_roles(
        self,
        roles: Iterable[UserRole],
        title: str,
        message: str,
        type: str,
        product_id: Optional[int] = None,
        risk_level: Optional[str] = None
    ) -> int:
        """Create the same notification for every active user holding one of ``roles``.

        Returns:
            Number of notifications created
        """
        pass

    @abstractmethod
    async def get_user(self, user_id: int) -> Optional[UserRecord]:
        pass

    @abstractmethod
    async def list_recent_orders(self, user_id: int, limit: int = 5) -> List[OrderRecord]:
        """List a customer's online orders, newest first."""
        pass

    @abstractmethod
    async def get_risk_snapshot(self, product_id: int) -> Optional[str]:
        """Return the last alert tier recorded for a product, if any."""
        pass

    @abstractmethod
    async def upsert_risk_snapshot(self, product_id: int, risk_level: str) -> None:
        pass
