from sqlalchemy import (Column, Float, ForeignKey, Integer, String, func)
from sqlalchemy.dialects.postgresql import TIMESTAMP
from sqlalchemy.orm import relationship

from stockpulse.db.base import Base


class SaleTransaction(Base):
    __tablename__ = 'sale_transactions'

    id = Column(Integer, primary_key=True, autoincrement=True)
    cashier_id = Column(Integer, ForeignKey('users.id'), nullable=True)
    payment_method = Column(String(50), nullable=True)
    total = Column(Float, nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False, index=True)

    items = relationship("SaleItem", back_populates="sale", cascade="all, delete-orphan")
