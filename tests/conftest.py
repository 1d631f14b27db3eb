"""
Shared fixtures: an in-memory database, a TestClient wired to it, and a
fake content enhancer standing in for the OpenAI-backed one.
"""
import os

# Configuration is read at import time, so it must be in place before app.* is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_dummy"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_secret"
os.environ["CLIENT_URL"] = "http://frontend.test"
os.environ["BASIC_PRICE_ID_USD"] = "price_basic_usd"
os.environ["BASIC_PRICE_ID_EUR"] = "price_basic_eur"
os.environ["PRO_PRICE_ID_USD"] = "price_pro_usd"
os.environ.pop("PRO_PRICE_ID_EUR", None)
os.environ["ADMIN_EMAILS"] = "owner@cvforge.test"
os.environ["LOGIN_RATE_LIMIT"] = "5"
os.environ.pop("NOTIFICATION_WEBHOOK_URL", None)
os.environ.pop("OPENAI_API_KEY", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.core.auth_dependency import get_db
from app.core.errors import ExternalServiceError
from app.core.rate_limit import rate_limit_store
from app.core.security import create_access_token, hash_password
from app.db import crud
from app.db.base import Base
from app.db import models  # noqa: F401
from app.services.enhancer_service import get_enhancer, get_optional_enhancer


# Setup in-memory SQLite database for testing
test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


class FakeEnhancer:
    """Records calls; optionally fails like a provider outage."""

    def __init__(self):
        self.fail = False
        self.calls = []

    def _call(self, name, data, lang):
        self.calls.append((name, lang))
        if self.fail:
            raise ExternalServiceError("Failed to generate AI content")

    def enhance_resume(self, resume, lang=None):
        self._call("enhance_resume", resume, lang)
        return {**resume, "summary": "Enhanced summary"}

    def enhance_resume_summary(self, resume, lang=None):
        self._call("enhance_resume_summary", resume, lang)
        return {**resume, "summary": "Enhanced summary only"}

    def enhance_cover_letter(self, letter, lang=None):
        self._call("enhance_cover_letter", letter, lang)
        return {
            **letter,
            "closing": "Enhanced letter body",
            "originalContent": letter.get("content") or "",
            "enhancedContent": "Enhanced letter body",
        }

    def feedback(self, document, kind, lang=None):
        self._call(f"feedback:{kind}", document, lang)
        return "Solid structure; quantify your results."


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=test_engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def enhancer():
    return FakeEnhancer()


@pytest.fixture
def client(db, enhancer):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_enhancer] = lambda: enhancer
    app.dependency_overrides[get_optional_enhancer] = lambda: enhancer
    rate_limit_store.clear()
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        rate_limit_store.clear()


@pytest.fixture
def make_user(db):
    """Factory for users in a given subscription state."""
    def _make_user(
        email="jane@example.com",
        user_id=None,
        plan="free",
        status="active",
        role="user",
        billing_ref=None,
        password=None,
        display_name="Jane Doe",
    ):
        user = crud.create_user(
            db,
            email=email,
            user_id=user_id,
            password_hash=hash_password(password) if password else None,
            display_name=display_name,
        )
        return crud.update_user(db, user, {
            "subscription_plan": plan,
            "subscription_status": status,
            "role": role,
            "billing_customer_ref": billing_ref,
        })

    return _make_user


@pytest.fixture
def auth_headers():
    def _auth_headers(user):
        token = create_access_token({"uid": user.id, "email": user.email})
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers
