# storefront/data/seed.py
from decimal import Decimal

from storefront.data.database import SessionLocal
from storefront.data.models import UserModel, ProductModel

DEMO_PRODUCTS = [
    ("Brown rice 5kg", Decimal("12.50"), "Cereals", 40),
    ("Whole milk 1l", Decimal("1.20"), "Fresh milk", 120),
    ("Yam tuber", Decimal("3.75"), "Tuber foods", 60),
    ("Green tea leaves", Decimal("6.90"), "Tea leaves", 25),
]


def seed(db=None) -> bool:
    """Demo catalog for local development. Returns False if data already exists."""
    own_session = db is None
    db = db or SessionLocal()
    try:
        # not forcing: only seed if empty
        if db.query(ProductModel).first():
            return False

        admin = UserModel(user_name="admin", email="admin@storefront.local", role="superadmin")
        db.add(admin)
        db.flush()

        for name, price, category, quantity in DEMO_PRODUCTS:
            db.add(
                ProductModel(
                    name=name,
                    price=price,
                    description=f"{name} from local farms",
                    quantity=quantity,
                    category=category,
                    pictures=[],
                    user_id=admin.id,
                )
            )
        db.commit()
        return True
    finally:
        if own_session:
            db.close()


if __name__ == "__main__":
    seed()
