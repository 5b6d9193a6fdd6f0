import os

# Must be set before the app modules read them at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

from database import build_engine, create_db_and_tables, get_session
from main import app
from services import auth


@pytest.fixture()
def engine():
    engine = build_engine("sqlite://")
    create_db_and_tables(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture()
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture()
def client(engine):
    """TestClient whose requests share the per-test in-memory database"""
    def override_get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(session):
    """Register a user through the auth service and return its profile"""
    def _make(email="alice@example.com", name="Alice", password="password123"):
        return auth.register(
            session, {"name": name, "email": email, "password": password}
        )
    return _make


@pytest.fixture()
def auth_headers(client):
    """Register + log in over HTTP, return Authorization headers"""
    def _headers(email="alice@example.com", name="Alice", password="password123"):
        client.post(
            "/api/user/register",
            json={"name": name, "email": email, "password": password},
        )
        res = client.post(
            "/api/user/login", json={"email": email, "password": password}
        )
        return {"Authorization": f"Bearer {res.json()['token']}"}
    return _headers
