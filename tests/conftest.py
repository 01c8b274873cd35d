"""
Pytest fixtures for stockbook tests.

Each test gets its own SQLite file under tmp_path with the schema built
from the models, plus a FastAPI test client wired to that database.
"""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from stockbook.database import Base, build_engine, get_db
from stockbook.main import app
from stockbook.models.products import Product
from stockbook.models.users import User


@pytest.fixture(scope="function")
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'stockbook-test.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture(scope="function")
def db_session(session_factory):
    session = session_factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture(scope="function")
def unreachable_factory(tmp_path):
    """Sessions bound to a database file whose directory does not exist."""
    engine = build_engine(f"sqlite:///{tmp_path / 'missing-dir' / 'stockbook.db'}")
    yield sessionmaker(bind=engine, autocommit=False, autoflush=False)
    engine.dispose()


@pytest.fixture(scope="function")
def unreachable_session(unreachable_factory):
    session = unreachable_factory()
    yield session
    session.close()


def _make_user(db_session, username):
    user = User(username=username, password_hash="not-a-real-hash")
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope="function")
def user_a(db_session):
    """First tenant."""
    return _make_user(db_session, "amina")


@pytest.fixture(scope="function")
def user_b(db_session):
    """Second tenant, used to prove isolation."""
    return _make_user(db_session, "youssef")


@pytest.fixture(scope="function")
def product_a(db_session, user_a):
    """10.00 x 5 owned by user A."""
    product = Product(
        user_id=user_a.id,
        name="Argan oil 250ml",
        purchase_price=Decimal("10.00"),
        quantity=5,
    )
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture(scope="function")
def product_b(db_session, user_b):
    """Owned by user B."""
    product = Product(
        user_id=user_b.id,
        name="Saffron 5g",
        purchase_price=Decimal("20.00"),
        quantity=2,
    )
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture(scope="function")
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def unreachable_client(unreachable_factory):
    def override_get_db():
        db = unreachable_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def register_and_login(client, username: str, password: str = "Str0ngPassw0rd") -> dict:
    """Create an account through the API and return its auth headers."""
    response = client.post("/auth/register", json={
        "username": username,
        "password": password,
    })
    assert response.status_code == 201, response.text

    response = client.post("/auth/login", data={
        "username": username,
        "password": password,
    })
    assert response.status_code == 200, response.text

    return auth_headers(response.json()["access_token"])


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
