from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from storefront.data.database import Base

ROLES = ("buyer", "admin", "superadmin")


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    user_name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True)
    role = Column(String, nullable=False, default="buyer")
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    payment_methods = relationship(
        "PaymentMethodModel",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="PaymentMethodModel.id",
    )


class PaymentMethodModel(Base):
    __tablename__ = "payment_methods"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    type = Column(String, nullable=False)
    is_default = Column(Boolean, nullable=False, default=False)
    # gateway token, never leaves the service
    token = Column(String, nullable=False)

    user = relationship("UserModel", back_populates="payment_methods")
