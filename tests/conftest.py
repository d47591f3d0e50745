from datetime import datetime, timezone
from itertools import count
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import pytest

from stockpulse.schemas.ledger import (
    DemandPredictionCreate,
    DemandPredictionRecord,
    InventoryRecord,
    OrderRecord,
    SaleLine,
    SaleLineRecord,
    SaleRecord,
    UserRecord,
    UserRole,
)
from stockpulse.services.forecasting.dates import as_utc
from stockpulse.services.ledger.base import LedgerStore

FIXED_NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


class InMemoryLedgerStore(LedgerStore):
    """LedgerStore kept in plain dicts and lists for service tests."""

    def __init__(self):
        self.products: Dict[int, InventoryRecord] = {}
        self.sales: List[SaleRecord] = []
        self.predictions: List[DemandPredictionRecord] = []
        self.notifications: List[dict] = []
        self.users: Dict[int, Tuple[UserRecord, bool]] = {}
        self.orders: List[Tuple[int, OrderRecord]] = []
        self.snapshots: Dict[int, str] = {}
        self.fail_prediction_after: Optional[int] = None
        self._sale_ids = count(1)
        self._prediction_ids = count(1)

    # Fixture helpers
    def add_product(
        self,
        product_id: int,
        name: str,
        quantity: int,
        unit_price: float = 10.0,
        low_stock_threshold: Optional[int] = 10,
        reorder_quantity: int = 100,
        category: Optional[str] = None
    ) -> InventoryRecord:
        record = InventoryRecord(
            product_id=product_id,
            product_name=name,
            quantity=quantity,
            low_stock_threshold=low_stock_threshold,
            reorder_quantity=reorder_quantity,
            unit_price=unit_price,
            category=category
        )
        self.products[product_id] = record
        return record

    def add_sale(self, timestamp: datetime, items: Sequence[Tuple[int, int]]) -> SaleRecord:
        lines = []
        for product_id, quantity in items:
            price = self.products[product_id].unit_price if product_id in self.products else 0.0
            lines.append(SaleLine(product_id=product_id, quantity=quantity, unit_price=price, subtotal=price * quantity))
        sale = SaleRecord(
            id=next(self._sale_ids),
            timestamp=timestamp,
            total=sum(line.subtotal for line in lines),
            lines=lines
        )
        self.sales.append(sale)
        return sale

    def add_user(self, user_id: int, role: UserRole, email: str, full_name: Optional[str] = None, active: bool = True):
        self.users[user_id] = (UserRecord(id=user_id, email=email, full_name=full_name, role=role), active)

    def add_order(self, user_id: int, order_id: int, status: str, total: float, created_at: datetime):
        self.orders.append((user_id, OrderRecord(id=order_id, status=status, total=total, created_at=created_at)))

    # LedgerStore
    async def list_sales(self, start: datetime, end: datetime) -> List[SaleRecord]:
        start, end = as_utc(start), as_utc(end)
        return [sale for sale in self.sales if start <= as_utc(sale.timestamp) <= end]

    async def list_sale_lines(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        product_ids: Optional[Iterable[int]] = None
    ) -> List[SaleLineRecord]:
        wanted = set(product_ids) if product_ids is not None else None
        lines = []
        for sale in self.sales:
            timestamp = as_utc(sale.timestamp)
            if start is not None and timestamp < as_utc(start):
                continue
            if end is not None and timestamp > as_utc(end):
                continue
            for line in sale.lines:
                if wanted is None or line.product_id in wanted:
                    lines.append(SaleLineRecord(
                        product_id=line.product_id,
                        quantity=line.quantity,
                        sale_timestamp=sale.timestamp
                    ))
        return lines

    async def list_inventory(self) -> List[InventoryRecord]:
        return [self.products[pid].model_copy() for pid in sorted(self.products)]

    async def search_inventory(self, name_query: str, limit: int = 5) -> List[InventoryRecord]:
        needle = name_query.lower()
        matches = [r for r in await self.list_inventory() if needle in r.product_name.lower()]
        return matches[:limit]

    async def create_demand_prediction(self, prediction: DemandPredictionCreate) -> DemandPredictionRecord:
        if self.fail_prediction_after is not None and len(self.predictions) >= self.fail_prediction_after:
            raise RuntimeError("prediction store unavailable")
        record = DemandPredictionRecord(id=next(self._prediction_ids), **prediction.model_dump())
        self.predictions.append(record.model_copy())
        return record

    async def list_demand_predictions(self, limit: int = 1000) -> List[DemandPredictionRecord]:
        ordered = sorted(self.predictions, key=lambda p: (as_utc(p.generated_at), p.id), reverse=True)
        records = []
        for prediction in ordered[:limit]:
            record = prediction.model_copy()
            product = self.products.get(record.product_id)
            record.product_name = product.product_name if product else None
            records.append(record)
        return records

    async def create_notification_for_roles(
        self,
        roles: Iterable[UserRole],
        title: str,
        message: str,
        type: str,
        product_id: Optional[int] = None,
        risk_level: Optional[str] = None
    ) -> int:
        wanted = {UserRole(role) for role in roles}
        created = 0
        for user, active in self.users.values():
            if active and user.role in wanted:
                self.notifications.append({
                    "user_id": user.id,
                    "title": title,
                    "message": message,
                    "type": type,
                    "product_id": product_id,
                    "risk_level": risk_level,
                })
                created += 1
        return created

    async def get_user(self, user_id: int) -> Optional[UserRecord]:
        entry = self.users.get(user_id)
        return entry[0] if entry else None

    async def list_recent_orders(self, user_id: int, limit: int = 5) -> List[OrderRecord]:
        orders = [order for owner, order in self.orders if owner == user_id]
        orders.sort(key=lambda order: order.created_at, reverse=True)
        return orders[:limit]

    async def get_risk_snapshot(self, product_id: int) -> Optional[str]:
        return self.snapshots.get(product_id)

    async def upsert_risk_snapshot(self, product_id: int, risk_level: str) -> None:
        self.snapshots[product_id] = risk_level


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def store():
    return InMemoryLedgerStore()


@pytest.fixture
def staffed_store(store):
    """Store with one active user per role plus an inactive admin."""
    store.add_user(1, UserRole.OWNER, "owner@example.com", "Olivia Owner")
    store.add_user(2, UserRole.ADMIN, "admin@example.com", "Adrian Admin")
    store.add_user(3, UserRole.CASHIER, "cashier@example.com", "Carmen Cashier")
    store.add_user(4, UserRole.CUSTOMER, "ana@example.com", "Ana Cruz")
    store.add_user(5, UserRole.ADMIN, "former@example.com", "Former Admin", active=False)
    return store
