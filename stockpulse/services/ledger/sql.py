import logging
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from sqlalchemy import and_, desc, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from stockpulse.core.config import get_settings
from stockpulse.db.models.demand_prediction import DemandPrediction
from stockpulse.db.models.inventory import Inventory
from stockpulse.db.models.notification import Notification
from stockpulse.db.models.online_order import OnlineOrder
from stockpulse.db.models.product import Product
from stockpulse.db.models.product_risk_snapshot import ProductRiskSnapshot
from stockpulse.db.models.sale_item import SaleItem
from stockpulse.db.models.sale_transaction import SaleTransaction
from stockpulse.db.models.user import User
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
from stockpulse.services.ledger.base import LedgerStore

logger = logging.getLogger(__name__)
settings = get_settings()


def _to_inventory_record(product: Product, inventory: Optional[Inventory]) -> InventoryRecord:
    return InventoryRecord(
        product_id=product.id,
        product_name=product.name,
        quantity=inventory.quantity if inventory else 0,
        low_stock_threshold=inventory.low_stock_threshold if inventory else None,
        reorder_quantity=inventory.reorder_quantity if inventory else settings.DEFAULT_REORDER_QUANTITY,
        unit_price=float(product.unit_price or 0),
        category=product.category
    )


def inventory_search_query(name_query: str, limit: int):
    # LIKE wildcards in the user's text match literally
    return select(Product, Inventory).outerjoin(
        Inventory, Inventory.product_id == Product.id
    ).where(
        Product.name.icontains(name_query, autoescape=True)
    ).order_by(Product.id).limit(limit)


class SqlLedgerStore(LedgerStore):
    """LedgerStore backed by the relational database.

    Each call opens its own session from ``session_factory`` so that reads
    issued together through ``asyncio.gather`` never share a session.
    """

    def __init__(self, session_factory: Callable[[], AsyncSession]):
        self._session_factory = session_factory

    async def list_sales(self, start: datetime, end: datetime) -> List[SaleRecord]:
        async with self._session_factory() as db:
            query = select(SaleTransaction).options(
                selectinload(SaleTransaction.items)
            ).where(
                and_(
                    SaleTransaction.created_at >= start,
                    SaleTransaction.created_at <= end
                )
            ).order_by(SaleTransaction.created_at)

            result = await db.execute(query)
            sales = result.scalars().all()

        return [
            SaleRecord(
                id=sale.id,
                timestamp=sale.created_at,
                total=float(sale.total),
                lines=[
                    SaleLine(
                        product_id=item.product_id,
                        quantity=item.quantity,
                        unit_price=float(item.unit_price),
                        subtotal=float(item.subtotal)
                    ) for item in sale.items
                ]
            ) for sale in sales
        ]

    async def list_sale_lines(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        product_ids: Optional[Iterable[int]] = None
    ) -> List[SaleLineRecord]:
        query = select(
            SaleItem.product_id,
            SaleItem.quantity,
            SaleTransaction.created_at.label("sale_timestamp")
        ).join(
            SaleTransaction, SaleItem.sale_id == SaleTransaction.id
        )

        if start is not None:
            query = query.where(SaleTransaction.created_at >= start)
        if end is not None:
            query = query.where(SaleTransaction.created_at <= end)
        if product_ids is not None:
            query = query.where(SaleItem.product_id.in_(list(product_ids)))

        async with self._session_factory() as db:
            result = await db.execute(query)
            rows = result.fetchall()

        return [
            SaleLineRecord(
                product_id=row.product_id,
                quantity=row.quantity,
                sale_timestamp=row.sale_timestamp
            ) for row in rows
        ]

    async def list_inventory(self) -> List[InventoryRecord]:
        query = select(Product, Inventory).join(
            Inventory, Inventory.product_id == Product.id
        ).order_by(Product.id)

        async with self._session_factory() as db:
            result = await db.execute(query)
            rows = result.all()

        return [_to_inventory_record(product, inventory) for product, inventory in rows]

    async def search_inventory(self, name_query: str, limit: int = 5) -> List[InventoryRecord]:
        query = inventory_search_query(name_query, limit)

        async with self._session_factory() as db:
            result = await db.execute(query)
            rows = result.all()

        return [_to_inventory_record(product, inventory) for product, inventory in rows]

    async def create_demand_prediction(self, prediction: DemandPredictionCreate) -> DemandPredictionRecord:
        async with self._session_factory() as db:
            row = DemandPrediction(
                product_id=prediction.product_id,
                predicted_demand=prediction.predicted_demand,
                suggested_restock=prediction.suggested_restock,
                risk_of_stockout=prediction.risk_of_stockout.value,
                period_start=prediction.period_start,
                period_end=prediction.period_end,
                generated_at=prediction.generated_at
            )
            db.add(row)
            await db.commit()
            await db.refresh(row)

        return DemandPredictionRecord.model_validate(row)

    async def list_demand_predictions(self, limit: int = 1000) -> List[DemandPredictionRecord]:
        query = select(DemandPrediction, Product.name).join(
            Product, DemandPrediction.product_id == Product.id
        ).order_by(
            desc(DemandPrediction.generated_at), desc(DemandPrediction.id)
        ).limit(limit)

        async with self._session_factory() as db:
            result = await db.execute(query)
            rows = result.all()

        records = []
        for prediction, product_name in rows:
            record = DemandPredictionRecord.model_validate(prediction)
            record.product_name = product_name
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
        role_names = [UserRole(role).value for role in roles]

        async with self._session_factory() as db:
            result = await db.execute(
                select(User.id).where(
                    and_(
                        User.role.in_(role_names),
                        User.is_active.is_(True)
                    )
                )
            )
            user_ids = result.scalars().all()

            for user_id in user_ids:
                db.add(Notification(
                    user_id=user_id,
                    product_id=product_id,
                    title=title,
                    message=message,
                    type=type,
                    risk_level=risk_level
                ))
            await db.commit()

        logger.info(f"Created {len(user_ids)} '{type}' notification(s) for roles {role_names}")
        return len(user_ids)

    async def get_user(self, user_id: int) -> Optional[UserRecord]:
        async with self._session_factory() as db:
            user = await db.get(User, user_id)

        if user is None:
            return None
        return UserRecord(id=user.id, email=user.email, full_name=user.full_name, role=UserRole(user.role))

    async def list_recent_orders(self, user_id: int, limit: int = 5) -> List[OrderRecord]:
        query = select(OnlineOrder).where(
            OnlineOrder.user_id == user_id
        ).order_by(desc(OnlineOrder.created_at)).limit(limit)

        async with self._session_factory() as db:
            result = await db.execute(query)
            orders = result.scalars().all()

        return [
            OrderRecord(id=order.id, status=order.status, total=float(order.total), created_at=order.created_at)
            for order in orders
        ]

    async def get_risk_snapshot(self, product_id: int) -> Optional[str]:
        async with self._session_factory() as db:
            result = await db.execute(
                select(ProductRiskSnapshot.risk_level).where(ProductRiskSnapshot.product_id == product_id)
            )
            return result.scalar_one_or_none()

    async def upsert_risk_snapshot(self, product_id: int, risk_level: str) -> None:
        async with self._session_factory() as db:
            result = await db.execute(
                select(ProductRiskSnapshot).where(ProductRiskSnapshot.product_id == product_id)
            )
            snapshot = result.scalars().first()

            if snapshot:
                snapshot.risk_level = risk_level
            else:
                db.add(ProductRiskSnapshot(product_id=product_id, risk_level=risk_level))

            await db.commit()
