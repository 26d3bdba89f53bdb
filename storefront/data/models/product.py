from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime, ForeignKey, JSON, CheckConstraint

from storefront.data.database import Base

CATEGORIES = (
    "Cereals",
    "Fresh milk",
    "Tuber foods",
    "Tea leaves",
    "Fruits",
    "Spices",
    "Vegetables",
)


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False, unique=True)
    price = Column(Numeric(10, 2), nullable=False)
    description = Column(Text, nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    category = Column(String, nullable=False, index=True)
    pictures = Column(JSON, nullable=False, default=list)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_product_quantity_non_negative"),
        CheckConstraint("price >= 0", name="ck_product_price_non_negative"),
        CheckConstraint(
            "category IN (" + ", ".join(f"'{c}'" for c in CATEGORIES) + ")",
            name="ck_product_category",
        ),
    )
