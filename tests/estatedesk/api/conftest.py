"""
Shared fixtures for API tests.

Every test gets a fresh in-memory SQLite database; the application's get_db
dependency is pointed at it for the duration of the test.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from src.estatedesk.api.auth import create_user_token, get_password_hash
from src.estatedesk.api.dependencies import get_db
from src.estatedesk.api.main import app
from src.estatedesk.db.base import Base
from src.estatedesk.db.models import User

DEFAULT_PASSWORD = "secret123"


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)

    yield factory

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.rollback()
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session_factory):
    """Create a user directly in the database and return (user, auth headers)."""
    counter = {"n": 0}

    def _make_user(role="client", email=None, status="active", password=DEFAULT_PASSWORD):
        counter["n"] += 1
        session = session_factory()
        try:
            user = User(
                first_name=role.title(),
                last_name=f"User{counter['n']}",
                email=email or f"{role}{counter['n']}@example.com",
                hashed_password=get_password_hash(password),
                role=role,
                status=status,
            )
            session.add(user)
            session.commit()
            headers = {"Authorization": f"Bearer {create_user_token(user)}"}
            return user, headers
        finally:
            session.close()

    return _make_user


@pytest.fixture
def admin(make_user):
    return make_user("admin")


@pytest.fixture
def owner(make_user):
    return make_user("property_owner")


@pytest.fixture
def agent(make_user):
    return make_user("agent")


@pytest.fixture
def client_user(make_user):
    return make_user("client")
