"""
conftest.py — Shared test fixtures for the wholesale API

Provides an in-memory SQLite database (the app's own Database object, built
from DATABASE_URL=sqlite://), a FastAPI TestClient with auth overridden, and
factory fixtures for the core models.

Business Rules:
- All tests run against an isolated in-memory DB
- Auth is overridden so tests never need a session cookie
- Each test function gets freshly created tables

Called by: all test files via pytest autodiscovery
Depends on: wholesale.main (app), wholesale.models, wholesale.dependencies
"""

import os

os.environ["TESTING"] = "1"  # Must be set before importing app modules
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_123"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_123"
os.environ["NOTIFICATION_API_URL"] = ""
os.environ["NOTIFICATION_API_KEY"] = ""

from decimal import Decimal

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from wholesale.database import Database, get_db
from wholesale.dependencies import require_admin, require_user
from wholesale.main import app
from wholesale.models import (
    Base,
    Category,
    MembershipDiscount,
    MembershipTier,
    PricingTier,
    Product,
    RfqInquiry,
    SupportAgent,
    User,
    UserMembership,
)

database = app.state.database
engine = database.engine


# ── Fixtures ─────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def db_session():
    """Create all tables, yield a session, then tear down."""
    Base.metadata.create_all(bind=engine)
    session = database.session()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def file_database(tmp_path):
    """A SQLite file shared by several sessions, so each sees the others' commits.

    Sessions stand in for concurrent requests. Tests end each step with
    commit() the way a request ends, so no session sits on a read lock.
    """
    shared = Database(f"sqlite:///{tmp_path / 'shared.db'}")
    shared.create_all()
    try:
        yield shared
    finally:
        shared.dispose()


@pytest.fixture()
def test_user(db_session: Session) -> User:
    """A standard buyer."""
    user = User(email="buyer@acme-retail.com", name="Test Buyer", role="user", open_id="oid-buyer")
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture()
def other_user(db_session: Session) -> User:
    user = User(email="other@example.com", name="Other Buyer", role="user", open_id="oid-other")
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture()
def admin_user(db_session: Session) -> User:
    """Seller staff."""
    user = User(email="staff@wholesale-b2b.com", name="Seller Staff", role="admin", open_id="oid-admin")
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture()
def test_category(db_session: Session) -> Category:
    cat = Category(name="Electronics", slug="electronics", description="Surplus electronics")
    db_session.add(cat)
    db_session.commit()
    return cat


@pytest.fixture()
def test_product(db_session: Session, test_category: Category) -> Product:
    """A product priced at 1000 cents, MOQ 1, plenty of stock."""
    product = Product(
        name="Wireless Speaker",
        slug="wireless-speaker",
        sku="WS-001",
        description="Portable speaker",
        category_id=test_category.id,
        base_price=1000,
        moq=1,
        stock=10_000,
        images=["https://cdn.example.com/ws-001.jpg"],
        featured=True,
    )
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture()
def tiered_product(db_session: Session, test_product: Product) -> Product:
    """test_product with tier A [100, 499] @ 900 and tier B [500, inf) @ 800."""
    db_session.add_all(
        [
            PricingTier(product_id=test_product.id, min_quantity=100, max_quantity=499, price=900),
            PricingTier(product_id=test_product.id, min_quantity=500, max_quantity=None, price=800),
        ]
    )
    db_session.commit()
    db_session.refresh(test_product)
    return test_product


@pytest.fixture()
def test_inquiry(db_session: Session, test_user: User, test_product: Product) -> RfqInquiry:
    inquiry = RfqInquiry(
        user_id=test_user.id,
        product_id=test_product.id,
        quantity=500,
        company_name="Acme Retail",
        contact_name="Test Buyer",
        contact_email=test_user.email,
        status="pending",
    )
    db_session.add(inquiry)
    db_session.commit()
    return inquiry


@pytest.fixture()
def gold_tier(db_session: Session) -> MembershipTier:
    tier = MembershipTier(name="Gold", level=2, discount_percentage=Decimal("10"), min_annual_purchase=5_000_000)
    db_session.add(tier)
    db_session.commit()
    return tier


@pytest.fixture()
def gold_member(db_session: Session, test_user: User, gold_tier: MembershipTier) -> UserMembership:
    membership = UserMembership(user_id=test_user.id, tier_id=gold_tier.id, annual_purchase_amount=6_000_000)
    db_session.add(membership)
    db_session.commit()
    return membership


@pytest.fixture()
def make_discount(db_session: Session):
    """Factory: make_discount(tier, value, product=None, category=None, **kw)."""

    def _make(tier, value, product=None, category=None, **kw):
        row = MembershipDiscount(
            tier_id=tier.id,
            product_id=product.id if product else None,
            category_id=category.id if category else None,
            discount_type=kw.pop("discount_type", "percentage"),
            discount_value=Decimal(str(value)),
            **kw,
        )
        db_session.add(row)
        db_session.commit()
        return row

    return _make


@pytest.fixture()
def make_agent(db_session: Session):
    def _make(name="Agent Smith", max_chats=1, status="online", current_chats=0):
        agent = SupportAgent(name=name, max_chats=max_chats, status=status, current_chats=current_chats)
        db_session.add(agent)
        db_session.commit()
        return agent

    return _make


# ── Clients ──────────────────────────────────────────────────────────


def _install_overrides(db_session: Session, user: User) -> None:
    def _override_db():
        yield db_session

    def _override_user():
        return user

    def _override_admin():
        if user.role != "admin":
            raise HTTPException(403, "Admin access required")
        return user

    app.dependency_overrides[get_db] = _override_db
    app.dependency_overrides[require_user] = _override_user
    app.dependency_overrides[require_admin] = _override_admin


@pytest.fixture()
def client(db_session: Session, test_user: User) -> TestClient:
    """TestClient acting as test_user (a buyer)."""
    _install_overrides(db_session, test_user)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def admin_client(db_session: Session, admin_user: User) -> TestClient:
    """TestClient acting as admin_user (seller staff)."""
    _install_overrides(db_session, admin_user)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def anon_client(db_session: Session) -> TestClient:
    """TestClient with only the DB overridden; auth runs for real."""

    def _override_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_db
    yield TestClient(app)
    app.dependency_overrides.clear()
