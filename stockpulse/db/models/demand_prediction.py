from sqlalchemy import (Column, Float, ForeignKey, Index, Integer, String, func)
from sqlalchemy.dialects.postgresql import TIMESTAMP
from sqlalchemy.orm import relationship

from stockpulse.db.base import Base


class DemandPrediction(Base):
    """Immutable demand snapshot. Rows are appended per run and never updated."""
    __tablename__ = 'demand_predictions'

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey('products.id'), nullable=False)
    predicted_demand = Column(Float, nullable=False)
    suggested_restock = Column(Integer, nullable=False)
    risk_of_stockout = Column(String(10), nullable=False)
    period_start = Column(TIMESTAMP(timezone=True), nullable=False)
    period_end = Column(TIMESTAMP(timezone=True), nullable=False)
    generated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)

    product = relationship("Product", back_populates="predictions")

    __table_args__ = (
        Index('idx_demand_predictions_product_generated', 'product_id', 'generated_at'),
    )

    def __repr__(self):
        return f"<DemandPrediction(product_id={self.product_id}, generated_at={self.generated_at}>"
