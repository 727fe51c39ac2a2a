"""Pytest fixtures for storefront tests."""

import os

# must be set before anything from storefront is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["PAYSTACK_SECRET_KEY"] = "sk_test_webhook_secret"
os.environ["RESEND_API_KEY"] = ""

import json
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select

from storefront.api import create_app
from storefront.api.deps import get_gateway, get_notifier, get_webhook_secret
from storefront.data.database import Base, SessionLocal, engine, init_db
from storefront.data.models import DiscountCodeModel, OrderModel, ProfileModel, UserModel
from storefront.domain.schemas import CartItemIn, CheckoutResult, CustomerDetailsIn
from storefront.services.webhook_service import sign
from storefront.utils.errors import GatewayError
from storefront.utils.security import create_access_token

WEBHOOK_SECRET = "sk_test_webhook_secret"


class FakeGateway:
    """Stands in for PaystackClient; records every initialize call."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls = []

    def initialize_transaction(self, email: str, amount_minor: int, metadata: dict) -> CheckoutResult:
        self.calls.append({"email": email, "amount": amount_minor, "metadata": metadata})
        if self.fail:
            raise GatewayError("Payment gateway unavailable")
        reference = f"ref_{len(self.calls):04d}"
        return CheckoutResult(
            authorization_url=f"https://checkout.paystack.com/{reference}",
            reference=reference,
        )


class FakeNotifier:
    def __init__(self):
        self.seller = []
        self.buyer = []

    def send_seller_order_notice(self, order):
        self.seller.append(order)

    def send_buyer_delivery_confirmation(self, order):
        self.buyer.append(order)


@pytest.fixture
def db():
    """Fresh schema per test on the shared in-memory database."""
    init_db()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


def _make_user(db, email: str, is_admin: bool = False, with_profile: bool = True, verified: bool = True):
    user = UserModel(email=email, email_verified=verified, is_admin=is_admin)
    db.add(user)
    if with_profile:
        db.add(ProfileModel(email=email, full_name="Ada Obi", phone="08030000000"))
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def buyer(db):
    return _make_user(db, "buyer@example.com")


@pytest.fixture
def admin(db):
    return _make_user(db, "admin@example.com", is_admin=True)


@pytest.fixture
def user_without_profile(db):
    return _make_user(db, "noprofile@example.com", with_profile=False)


@pytest.fixture
def make_discount(db):
    def _make(code="SAVE10", percentage=10, usage_limit=None, used_count=0, active=True, expires_at=None):
        discount = DiscountCodeModel(
            code=code,
            discount_percentage=percentage,
            usage_limit=usage_limit,
            used_count=used_count,
            active=active,
            expires_at=expires_at,
        )
        db.add(discount)
        db.commit()
        db.refresh(discount)
        return discount

    return _make


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def client(db, gateway, notifier):
    app = create_app()
    app.dependency_overrides[get_gateway] = lambda: gateway
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_webhook_secret] = lambda: WEBHOOK_SECRET
    with TestClient(app) as c:
        yield c


def auth_header(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


def signed_webhook(event: str, reference: str, secret: str = WEBHOOK_SECRET) -> tuple[bytes, dict]:
    body = json.dumps({"event": event, "data": {"reference": reference, "status": "success"}}).encode()
    return body, {"x-paystack-signature": sign(body, secret), "content-type": "application/json"}


def cart_items():
    """Two hoodies at 32,000 each."""
    return [
        CartItemIn(id=1, name="Anchor Hoodie", price=Decimal("32000"), quantity=1, size="L", color="Black"),
        CartItemIn(id=2, name="Anchor Hoodie", price=Decimal("32000"), quantity=1, size="M", color="Sand"),
    ]


def customer(**overrides):
    data = {
        "name": "Ada Obi",
        "email": "ada@example.com",
        "address": "12 Admiralty Way, Lekki",
        "phone": "08030000000",
        "state": "Lagos",
    }
    data.update(overrides)
    return CustomerDetailsIn(**data)


def checkout_body(**overrides):
    body = {
        "items": [
            {"id": 1, "name": "Anchor Hoodie", "price": 32000, "quantity": 2, "size": "L", "color": "Black"},
        ],
        "customerDetails": customer().model_dump(),
        "discount": 0,
        "promoCode": None,
        "shippingFee": 3500,
    }
    body.update(overrides)
    return body


def order_by_reference(db, reference: str) -> OrderModel | None:
    db.expire_all()
    return db.execute(
        select(OrderModel).where(OrderModel.paystack_reference == reference)
    ).scalar_one_or_none()


def count_orders(db) -> int:
    db.expire_all()
    return len(db.execute(select(OrderModel)).scalars().all())


def past(days: int = 1) -> datetime:
    return datetime.now(timezone.utc) - timedelta(days=days)


def future(days: int = 1) -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=days)
