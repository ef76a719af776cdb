"""
Shared fixtures.

The environment is configured before anything from medora is imported:
settings and the engine are built at import time.
"""
import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="medora-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["JWT_SECRET"] = "test-access-secret"
os.environ["JWT_REFRESH_SECRET"] = "test-refresh-secret"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ENVIRONMENT"] = "test"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from medora.core.security import create_access_token, get_password_hash, token_payload_for  # noqa: E402
from medora.db.base import Base  # noqa: E402
from medora.db.session import SessionLocal, engine  # noqa: E402
from medora.main import app  # noqa: E402
from medora.models import Brand, Category, Medicine, Order, OrderItem, User  # noqa: E402
from medora.models.enums import OrderStatus, PaymentStatus, Role  # noqa: E402

PASSWORD = "Secret123"


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    # No context manager: skips the lifespan, so no default admin is created
    return TestClient(app)


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(token_payload_for(user))}"}


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role: Role = Role.CUSTOMER, email: str = None, phone: str = None,
              name: str = None, password: str = PASSWORD) -> User:
        counter["n"] += 1
        n = counter["n"]
        user = User(
            name=name or f"{role.value.title()} {n}",
            email=email if email is not None else f"{role.value.lower()}{n}@test.com",
            phone=phone,
            hashed_password=get_password_hash(password),
            role=role,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def customer(make_user):
    return make_user(Role.CUSTOMER, email="customer@test.com", phone="01712345678", name="Test Customer")


@pytest.fixture
def pharmacist(make_user):
    return make_user(Role.PHARMACIST, email="pharmacist@medora.com")


@pytest.fixture
def admin(make_user):
    return make_user(Role.ADMIN, email="admin@medora.com")


@pytest.fixture
def customer_headers(customer):
    return auth_headers(customer)


@pytest.fixture
def pharmacist_headers(pharmacist):
    return auth_headers(pharmacist)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def category(db):
    category = Category(name="Pain Relief", slug="pain-relief", description="Pain management")
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


@pytest.fixture
def brand(db):
    brand = Brand(name="Square Pharmaceuticals", slug="square")
    db.add(brand)
    db.commit()
    db.refresh(brand)
    return brand


@pytest.fixture
def make_medicine(db, category):
    counter = {"n": 0}

    def _make(**overrides) -> Medicine:
        counter["n"] += 1
        n = counter["n"]
        fields = {
            "name": f"Medicine {n}",
            "slug": f"medicine-{n}",
            "generic_name": f"Generic {n}",
            "description": "A medicine used in tests.",
            "price": 10.0,
            "stock": 100,
            "category_id": category.id,
            "images": [f"/images/medicine-{n}.jpg"],
            "sku": f"SKU-{n}",
        }
        fields.update(overrides)
        medicine = Medicine(**fields)
        db.add(medicine)
        db.commit()
        db.refresh(medicine)
        return medicine

    return _make


@pytest.fixture
def make_order(db):
    counter = {"n": 0}

    def _make(user: User, medicine: Medicine, quantity: int = 1,
              status: OrderStatus = OrderStatus.PENDING,
              payment_status: PaymentStatus = PaymentStatus.PENDING) -> Order:
        counter["n"] += 1
        total = medicine.price * quantity
        order = Order(
            order_number=f"ORD-TEST-{counter['n']}",
            user_id=user.id,
            status=status,
            payment_status=payment_status,
            subtotal=total,
            total=total,
            delivery_address="123 Test Street, Block A",
            delivery_city="Dhaka",
            delivery_state="Dhaka",
            delivery_zip_code="1200",
            delivery_phone="01712345678",
            items=[OrderItem(medicine_id=medicine.id, quantity=quantity, price=medicine.price, total=total)],
        )
        db.add(order)
        db.commit()
        db.refresh(order)
        return order

    return _make
