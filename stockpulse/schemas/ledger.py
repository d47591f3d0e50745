from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class UserRole(str, Enum):
    CUSTOMER = "CUSTOMER"
    CASHIER = "CASHIER"
    OWNER = "OWNER"
    ADMIN = "ADMIN"


class StockoutRisk(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


# Ledger records (read-only to the engine)
class SaleLine(BaseModel):
    product_id: int
    quantity: int
    unit_price: float
    subtotal: float

class SaleRecord(BaseModel):
    id: int
    timestamp: datetime
    total: float
    lines: List[SaleLine] = Field(default_factory=list)

    model_config = {
        "from_attributes": True
    }

class SaleLineRecord(BaseModel):
    """A sale line joined with its parent sale's timestamp."""
    product_id: int
    quantity: int
    sale_timestamp: datetime

class InventoryRecord(BaseModel):
    product_id: int
    product_name: str
    quantity: int
    low_stock_threshold: Optional[int] = None
    reorder_quantity: int = 100
    unit_price: float = 0.0
    category: Optional[str] = None


# Demand prediction snapshots
class DemandPredictionCreate(BaseModel):
    product_id: int
    predicted_demand: float
    suggested_restock: int
    risk_of_stockout: StockoutRisk
    period_start: datetime
    period_end: datetime
    generated_at: datetime

class DemandPredictionRecord(DemandPredictionCreate):
    id: int
    product_name: Optional[str] = None

    model_config = {
        "from_attributes": True
    }

    @property
    def horizon_days(self) -> int:
        """Days ahead the predicted demand covers."""
        return max(1, round((self.period_end - self.generated_at).total_seconds() / 86400))


# Collaborator records used by the chat assistant
class UserRecord(BaseModel):
    id: int
    email: str
    full_name: Optional[str] = None
    role: UserRole

class OrderRecord(BaseModel):
    id: int
    status: str
    total: float
    created_at: datetime
