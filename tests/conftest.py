"""Pytest configuration for cart service tests."""

import os
import tempfile

# przed importem aplikacji: sqlite zamiast postgresa
_DB_PATH = os.path.join(tempfile.gettempdir(), "storefront_cart_test.db")
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_PATH}"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timezone, timedelta

import fakeredis
import pytest
from fastapi import Depends
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from storefront_cart.main import app
from storefront_cart.api.routers.carts import get_service
from storefront_cart.data.database import Base, engine, get_db, SessionLocal
from storefront_cart.domain.schemas import CartConfig, Product
from storefront_cart.services.cart_service import CartService


NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def iso(moment: datetime) -> str:
    return moment.isoformat()


class FakeProductClient:
    """Product-service w pamieci."""

    def __init__(self, products=None):
        self.products = {p.id: p for p in (products or [])}
        self.calls = []

    def fetch_product(self, product_id: int):
        self.calls.append(product_id)
        return self.products.get(product_id)


class FakeSettingsClient:
    def __init__(self, config: CartConfig | None = None, error: Exception | None = None):
        self.config = config
        self.error = error
        self.calls = 0

    def fetch_cart_config(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.config


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def redis_client():
    return fakeredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)


@pytest.fixture
def keyboard():
    return Product(id=1, name="Keyboard", price=100_000, discount=20)


@pytest.fixture
def mouse():
    return Product(id=2, name="Mouse", price=50_000)


@pytest.fixture
def flash_headset():
    future = datetime.now(timezone.utc) + timedelta(hours=6)
    return Product(
        id=4,
        name="Headset",
        price=240_000,
        discount=15,
        is_flash_deal=True,
        flash_deal_end_time=iso(future),
    )


@pytest.fixture
def products(keyboard, mouse, flash_headset):
    return FakeProductClient([keyboard, mouse, flash_headset])


@pytest.fixture
def db_session():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def api_client(db_session, products):
    def _service(db: Session = Depends(get_db)):
        return CartService(db=db, product_client=products)

    app.dependency_overrides[get_service] = _service
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.pop(get_service, None)
