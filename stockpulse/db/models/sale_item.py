from sqlalchemy import (Column, Float, ForeignKey, Integer)
from sqlalchemy.orm import relationship

from stockpulse.db.base import Base


class SaleItem(Base):
    __tablename__ = 'sale_items'

    id = Column(Integer, primary_key=True, autoincrement=True)
    sale_id = Column(Integer, ForeignKey('sale_transactions.id'), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey('products.id'), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)
    subtotal = Column(Float, nullable=False)

    sale = relationship("SaleTransaction", back_populates="items")
    product = relationship("Product", back_populates="sale_items")
