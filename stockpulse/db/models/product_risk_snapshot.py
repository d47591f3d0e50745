from sqlalchemy import (Column, ForeignKey, Integer, String, func)
from sqlalchemy.dialects.postgresql import TIMESTAMP

from stockpulse.db.base import Base


class ProductRiskSnapshot(Base):
    """Last alert tier seen for a product, used to detect tier changes."""
    __tablename__ = 'product_risk_snapshots'

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey('products.id'), nullable=False, unique=True)
    risk_level = Column(String(20), nullable=False)
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
