"""
Shared fixtures: an in-memory SQLite database per test, the FastAPI app wired
to it, and logged-in clients.
"""

import os
import tempfile

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="trailmate-uploads-")
os.environ["PASSWORD_HASH_ITERATIONS"] = "1000"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel

from backend.trailmate.core.database import get_db
from backend.trailmate.core.security import get_password_hash
from backend.trailmate.main import app as fastapi_app
from backend.trailmate.models import User

PASSWORD = "secret123"


@pytest.fixture
def engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    """Create a database session for testing."""
    with Session(engine) as session:
        yield session


@pytest.fixture
def make_user(db_session):
    """Factory for users that can log in with ``PASSWORD``."""

    def _make_user(name: str, email: str | None = None) -> User:
        user = User(
            name=name,
            email=email or f"{name.lower()}@example.com",
            hashed_password=get_password_hash(PASSWORD),
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def app(engine):
    """The API with its database dependency pointed at the test engine."""

    def override_get_db():
        with Session(engine) as session:
            yield session

    fastapi_app.dependency_overrides[get_db] = override_get_db
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    """Anonymous client."""
    return TestClient(app)


@pytest.fixture
def login(app):
    """Return a client holding a session cookie for the given user."""

    def _login(user: User) -> TestClient:
        user_client = TestClient(app)
        response = user_client.post(
            "/api/login", json={"email": user.email, "password": PASSWORD}
        )
        assert response.status_code == 200, response.text
        return user_client

    return _login


@pytest.fixture
def password():
    """Password of every user built by ``make_user``."""
    return PASSWORD
