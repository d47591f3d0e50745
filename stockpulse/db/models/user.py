from sqlalchemy import (Boolean, Column, Integer, String, func)
from sqlalchemy.dialects.postgresql import TIMESTAMP
from sqlalchemy.orm import relationship

from stockpulse.db.base import Base


class User(Base):
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    full_name = Column(String(255), nullable=True)
    role = Column(String(20), nullable=False, index=True)  # CUSTOMER, CASHIER, OWNER, ADMIN
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)

    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")
    online_orders = relationship("OnlineOrder", back_populates="user")
