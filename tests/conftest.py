import os

# must be set before storefront.utils.settings is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["MAIL_API_URL"] = ""

from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.data.database import Base, init_db
from storefront.data.models import PaymentMethodModel, ProductModel, UserModel

ADDRESS = {
    "full_name": "Ama Mensah",
    "address_line1": "12 Palm Street",
    "city": "Accra",
    "state": "Greater Accra",
    "postal_code": "00233",
    "country": "GH",
    "phone": "+233200000000",
}


def checkout_payload(payment_method_id, address=None):
    return {"payment_method_id": payment_method_id, "delivery_address": address or dict(ADDRESS)}


class FakeLockService:
    """In-memory stand-in for the Redis checkout lock."""

    def __init__(self):
        self.locks = {}
        self.released = []

    def acquire_checkout_lock(self, user_id, holder, ttl):
        if user_id in self.locks:
            return False
        self.locks[user_id] = holder
        return True

    def release_checkout_lock(self, user_id, holder):
        if self.locks.get(user_id) != holder:
            return False
        del self.locks[user_id]
        self.released.append(user_id)
        return True


class FakeNotificationService:
    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail

    def send_order_confirmation(self, to_address, order):
        if self.fail:
            raise RuntimeError("mail transport down")
        self.sent.append((to_address, order))
        return True


def make_session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture()
def db(engine):
    session = make_session_factory(engine)()
    yield session
    session.close()


@pytest.fixture()
def admin(db):
    user = UserModel(user_name="admin", email="admin@example.com", role="admin")
    db.add(user)
    db.commit()
    return user


@pytest.fixture()
def buyer(db):
    user = UserModel(user_name="kofi", email="kofi@example.com", role="buyer")
    db.add(user)
    db.commit()
    return user


@pytest.fixture()
def card(db, buyer):
    method = PaymentMethodModel(user_id=buyer.id, type="card", is_default=True, token="tok_secret_4242")
    db.add(method)
    db.commit()
    return method


@pytest.fixture()
def make_product(db, admin):
    counter = {"n": 0}

    def _make(name=None, price="10.00", quantity=10, pictures=None, category="Cereals"):
        counter["n"] += 1
        product = ProductModel(
            name=name or f"Product {counter['n']}",
            price=Decimal(price),
            description="test product",
            quantity=quantity,
            category=category,
            pictures=pictures if pictures is not None else [],
            user_id=admin.id,
        )
        db.add(product)
        db.commit()
        return product

    return _make


@pytest.fixture()
def lock_service():
    return FakeLockService()


@pytest.fixture()
def notifier():
    return FakeNotificationService()


@pytest.fixture()
def failing_notifier():
    return FakeNotificationService(fail=True)


@pytest.fixture()
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture()
def checkout_data():
    return checkout_payload


@pytest.fixture()
def file_engine(tmp_path):
    """File backed database so independent sessions get independent connections."""
    engine = create_engine(f"sqlite:///{tmp_path / 'storefront.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def file_session_factory(file_engine):
    return make_session_factory(file_engine)
