from datetime import timedelta

import pytest
from sqlmodel import select

from errors import AuthError, ValidationError
from models import User
from services import auth
from utils.jwt import create_jwt


def test_register_returns_public_profile(session, make_user):
    user = make_user(email="Alice@Example.com ")

    assert user["email"] == "alice@example.com"
    assert user["name"] == "Alice"
    assert "id" in user and "createdAt" in user
    assert "password" not in user and "passwordHash" not in user

    stored = session.exec(select(User)).one()
    assert stored.password_hash != "password123"


def test_register_duplicate_email_fails(session, make_user):
    make_user(email="alice@example.com")

    with pytest.raises(ValidationError, match="already exists"):
        make_user(email="ALICE@example.com", name="Other")

    assert len(session.exec(select(User)).all()) == 1


@pytest.mark.parametrize("fields", [
    {"email": "a@example.com", "password": "password123"},
    {"name": "A", "password": "password123"},
    {"name": "A", "email": "a@example.com"},
    {"name": "   ", "email": "a@example.com", "password": "password123"},
    {"name": "A", "email": "not-an-email", "password": "password123"},
    {"name": "A", "email": "a@example.com", "password": "short"},
])
def test_register_rejects_bad_fields(session, fields):
    with pytest.raises(ValidationError):
        auth.register(session, fields)

    assert session.exec(select(User)).all() == []


def test_login_returns_token_for_same_user(session, make_user):
    user = make_user()

    token, profile = auth.login(
        session, {"email": "alice@example.com", "password": "password123"}
    )

    assert profile == user
    assert auth.verify_token(token) == user["id"]


def test_login_wrong_password_fails(session, make_user):
    make_user()

    with pytest.raises(AuthError, match="Invalid credentials"):
        auth.login(session, {"email": "alice@example.com", "password": "wrong-password"})


def test_login_unknown_email_fails(session):
    with pytest.raises(AuthError, match="Invalid credentials"):
        auth.login(session, {"email": "nobody@example.com", "password": "password123"})


@pytest.mark.parametrize("token", [None, "", "garbage"])
def test_verify_token_rejects_missing_or_malformed(token):
    with pytest.raises(AuthError):
        auth.verify_token(token)


def test_verify_token_rejects_expired():
    token = create_jwt("user-1", "a@example.com", expires_in=timedelta(seconds=-1))

    with pytest.raises(AuthError):
        auth.verify_token(token)


def test_get_current_user(session, make_user):
    user = make_user()
    token, _ = auth.login(session, {"email": "alice@example.com", "password": "password123"})

    assert auth.get_current_user(session, token) == user


def test_get_current_user_for_deleted_account(session):
    token = create_jwt("missing-user", "ghost@example.com")

    with pytest.raises(AuthError):
        auth.get_current_user(session, token)
