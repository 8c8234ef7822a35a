import os

# must be set before marketplace.utils.settings is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CELERY_TASK_ALWAYS_EAGER", "true")

from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from marketplace.api.dependencies import (
    get_lock_service,
    get_notification_service,
    get_order_numbers,
)
from marketplace.data.database import Base, get_db
from marketplace.data.models import (
    BuyerModel,
    CartItemModel,
    CartModel,
    ProductModel,
    UserModel,
    VendorModel,
)
from marketplace.domain.checkout import CheckoutInput
from marketplace.main import create_app
from marketplace.services.checkout_service import CheckoutService
from marketplace.services.order_numbers import OrderNumberGenerator


class FakeLockService:
    """In-memory stand-in for the redis checkout lock."""

    def __init__(self):
        self.held = {}
        self.acquired = []
        self.released = []

    def acquire_checkout_lock(self, user_id, ttl):
        self.acquired.append(user_id)
        if user_id in self.held:
            return None
        token = f"token-{user_id}-{len(self.acquired)}"
        self.held[user_id] = token
        return token

    def release_checkout_lock(self, user_id, token):
        self.released.append(user_id)
        if self.held.get(user_id) == token:
            del self.held[user_id]
            return True
        return False


class RecordingNotifications:
    def __init__(self):
        self.sent = []

    def send_order_notification(self, vendor_id, order_id, order_number):
        self.sent.append((vendor_id, order_id, order_number))
        return True


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def market(db):
    """
    Buyer user, two vendors (A, B) with products, and one product whose
    owner has no vendor profile.
    """
    buyer_user = UserModel(name="Ana Buyer", email="ana@example.com")
    second_buyer = UserModel(name="Bruno Buyer", email="bruno@example.com")
    user_a = UserModel(name="Vendor A owner")
    user_b = UserModel(name="Vendor B owner")
    loner = UserModel(name="No vendor profile")
    db.add_all([buyer_user, second_buyer, user_a, user_b, loner])
    db.flush()

    vendor_a = VendorModel(user_id=user_a.id, name="Green Farm", email="a@farm.example", phone="111", tax_id="TAX-A")
    vendor_b = VendorModel(user_id=user_b.id, name="Hill Dairy", email="b@dairy.example", phone="222", tax_id="TAX-B")
    buyer = BuyerModel(user_id=buyer_user.id, name="Ana Buyer", phone="+55 11 99999-0000")
    db.add_all([vendor_a, vendor_b, buyer])
    db.flush()

    a1 = ProductModel(sku="A-1", name="Tomatoes", price=Decimal("10.00"), quantity=10, user_id=user_a.id)
    a2 = ProductModel(sku="A-2", name="Lettuce", price=Decimal("2.50"), quantity=5, user_id=user_a.id)
    b1 = ProductModel(sku="B-1", name="Cheese", price=Decimal("7.00"), quantity=3, user_id=user_b.id)
    orphan = ProductModel(sku="X-1", name="Mystery box", price=Decimal("1.00"), quantity=9, user_id=loner.id)
    db.add_all([a1, a2, b1, orphan])
    db.commit()

    return SimpleNamespace(
        buyer_user_id=buyer_user.id,
        second_buyer_id=second_buyer.id,
        buyer_id=buyer.id,
        vendor_a_id=vendor_a.id,
        vendor_b_id=vendor_b.id,
        vendor_a_user_id=user_a.id,
        vendor_b_user_id=user_b.id,
        a1=a1.id,
        a2=a2.id,
        b1=b1.id,
        orphan=orphan.id,
    )


@pytest.fixture
def fill_cart(db):
    """Writes a cart straight to the database, bypassing cart stock checks."""
    counter = {"n": 0}

    def fill(user_id, lines):
        counter["n"] += 1
        cart = CartModel(code=f"TESTCART{counter['n']}", user_id=user_id)
        db.add(cart)
        db.flush()
        for product_id, quantity in lines:
            db.add(CartItemModel(cart_id=cart.id, product_id=product_id, quantity=quantity))
        db.commit()
        return cart.id

    return fill


@pytest.fixture
def checkout_input():
    return CheckoutInput(
        payment_method="pix",
        shipping_address="Rua das Flores 10",
        shipping_city="Campinas",
        shipping_state="SP",
        shipping_postal_code="13000-000",
    )


@pytest.fixture
def lock_service():
    return FakeLockService()


@pytest.fixture
def notifications():
    return RecordingNotifications()


@pytest.fixture
def clock():
    return FixedClock(datetime(2025, 3, 1, 12, 30, 45, tzinfo=timezone.utc))


@pytest.fixture
def order_numbers(clock):
    return OrderNumberGenerator(clock=clock)


@pytest.fixture
def checkout_service(db, order_numbers, lock_service, notifications):
    return CheckoutService(
        db=db,
        order_numbers=order_numbers,
        lock_service=lock_service,
        notification_service=notifications,
    )


@pytest.fixture
def client(session_factory, lock_service, notifications, order_numbers):
    app = create_app(init_database=False)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_lock_service] = lambda: lock_service
    app.dependency_overrides[get_notification_service] = lambda: notifications
    app.dependency_overrides[get_order_numbers] = lambda: order_numbers

    return TestClient(app)
