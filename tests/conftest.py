import os
import time
from datetime import datetime
from decimal import Decimal
from zoneinfo import ZoneInfo

# Required settings must exist before venefoods modules are imported
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "anon-test-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from jose import jwt  # noqa: E402
from sqlmodel import Session, SQLModel  # noqa: E402

from venefoods.core.config import get_settings  # noqa: E402
from venefoods.database import build_engine, create_db_and_tables, get_session  # noqa: E402
from venefoods.main import app  # noqa: E402
from venefoods.models.coupon import Coupon  # noqa: E402
from venefoods.models.product import Product  # noqa: E402
from venefoods.repositories.coupon_repo import CouponRepository  # noqa: E402
from venefoods.repositories.order_repo import OrderRepository  # noqa: E402
from venefoods.repositories.product_repo import ProductRepository  # noqa: E402
from venefoods.repositories.settings_repo import SettingsRepository  # noqa: E402
from venefoods.services.cart_service import CartService  # noqa: E402
from venefoods.services.coupon_service import CouponService  # noqa: E402
from venefoods.services.order_service import OrderService  # noqa: E402
from venefoods.services.settings_service import SettingsService  # noqa: E402

CART_ID = "test-cart-0001"
FIXED_NOW = datetime(2025, 3, 7, 10, 30, tzinfo=ZoneInfo("America/Sao_Paulo"))


@pytest.fixture(name="engine")
def engine_fixture():
    engine = build_engine("sqlite://")
    create_db_and_tables(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session):
    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app, headers={"X-Cart-Id": CART_ID})
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def api():
    return get_settings().API_V1_STR


def make_token(email: str = "admin@venefoods.com", sub: str = "operator-1", ttl: int = 3600) -> str:
    settings = get_settings()
    claims = {"sub": sub, "email": email, "exp": int(time.time()) + ttl}
    return jwt.encode(claims, settings.SUPABASE_JWT_SECRET, algorithm=settings.SUPABASE_JWT_ALG)


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def make_product(session):
    def _make(name="Harina PAN", price="15.00", stock=10, **kwargs):
        product = Product(name=name, price=Decimal(price), stock=stock, **kwargs)
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    return _make


@pytest.fixture
def make_coupon(session):
    def _make(code="PROMO10", discount_type="percent", value="10", active=True):
        coupon = Coupon(
            code=code,
            discount_type=discount_type,
            value=Decimal(value),
            active=active,
        )
        session.add(coupon)
        session.commit()
        session.refresh(coupon)
        return coupon

    return _make


@pytest.fixture
def settings_service():
    return SettingsService(SettingsRepository())


@pytest.fixture
def cart_service():
    return CartService(ProductRepository(), CouponService(CouponRepository()))


@pytest.fixture
def order_service(cart_service, settings_service):
    return OrderService(
        OrderRepository(),
        ProductRepository(),
        cart_service,
        cart_service.coupon_service,
        settings_service,
        clock=lambda: FIXED_NOW,
    )
