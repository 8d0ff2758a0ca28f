"""Shared test fixtures.

Every test gets a fresh in-memory SQLite database. The API client shares the
test's session so assertions can read what a request committed.
"""

import itertools
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-testing-only")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from app.api.deps import get_db_session  # noqa: E402
from app.main import app  # noqa: E402
from app.models import User  # noqa: E402
from app.services.auth import hash_password  # noqa: E402

TEST_PASSWORD = "Secret123"

@pytest.fixture(scope="session")
def password_hash() -> str:
    """bcrypt is slow, hash the shared test password once."""
    return hash_password(TEST_PASSWORD)

@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()

@pytest.fixture
def db_session(engine):
    with Session(engine) as session:
        yield session

@pytest.fixture
def client(db_session: Session):
    def override_get_db_session():
        yield db_session

    app.dependency_overrides[get_db_session] = override_get_db_session
    yield TestClient(app)
    app.dependency_overrides.clear()

@pytest.fixture
def make_user(db_session: Session, password_hash: str):
    """Factory for persisted users."""
    counter = itertools.count(1)

    def _make(full_name: str | None = None, email: str | None = None, **fields) -> User:
        n = next(counter)
        fields.setdefault("hashed_password", password_hash)
        user = User(
            email=email or f"user{n}@example.com",
            full_name=full_name or f"User {n}",
            **fields,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make

@pytest.fixture
def test_user(make_user) -> User:
    return make_user(full_name="Alice Owner", email="alice@example.com")

@pytest.fixture
def other_user(make_user) -> User:
    return make_user(full_name="Bob Member", email="bob@example.com")

@pytest.fixture
def outsider(make_user) -> User:
    return make_user(full_name="Carol Outsider", email="carol@example.com")

@pytest.fixture
def test_password() -> str:
    return TEST_PASSWORD
