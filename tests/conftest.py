"""
Shared fixtures: an in-memory SQLite database wired into the app through
the get_db dependency override.
"""
import os

# Must be set before the app (and its config) is imported
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.db.base import Base
from app.db import models  # noqa: F401 - register tables
from app.core.auth_dependency import get_db
from app.core.rate_limit import rate_limit_store
from app.core.security import create_access_token
from app.services import auth_service


# Setup in-memory SQLite database for testing
TEST_DATABASE_URL = "sqlite:///:memory:"
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def override_get_db():
    """Override get_db dependency for testing."""
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()


# Override the database dependency
app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(scope="function", autouse=True)
def setup_db():
    """Create and drop tables for each test."""
    Base.metadata.create_all(bind=test_engine)
    rate_limit_store.clear()
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def db():
    """Provide a database session for tests."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def make_user(db):
    """Factory creating password accounts with a fresh trial subscription."""
    def _make_user(email, name="Test User", skills=None, role="user", onboarding_completed=True, **profile):
        user = auth_service.signup(db, email, "testpass123", name)
        user.skills = list(skills or [])
        user.role = role
        user.onboarding_completed = onboarding_completed
        for field, value in profile.items():
            setattr(user, field, value)
        db.commit()
        db.refresh(user)
        return user
    return _make_user


@pytest.fixture
def auth_headers():
    """Bearer header for a user."""
    def _auth_headers(user):
        return {"Authorization": f"Bearer {create_access_token({'sub': user.id})}"}
    return _auth_headers
