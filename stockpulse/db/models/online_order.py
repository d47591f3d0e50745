from sqlalchemy import (Column, Float, ForeignKey, Integer, String, func)
from sqlalchemy.dialects.postgresql import TIMESTAMP
from sqlalchemy.orm import relationship

from stockpulse.db.base import Base


class OnlineOrder(Base):
    __tablename__ = 'online_orders'

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    status = Column(String(30), nullable=False, default='PENDING')
    total = Column(Float, nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)

    user = relationship("User", back_populates="online_orders")
