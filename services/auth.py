import logging
from typing import Any, Mapping, Optional, Tuple, Union

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from errors import AuthError, UnexpectedError, ValidationError
from models import User
from schemas import UserRegister, UserLogin, dump_user, validate_fields
from utils.jwt import create_jwt, get_user_id_from_token
from utils.security import hash_password, verify_password

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


def get_user_by_email(session: Session, email: str) -> Optional[User]:
    return session.exec(
        select(User).where(User.email == email.strip().lower())
    ).first()


def register(
    session: Session, fields: Union[UserRegister, Mapping[str, Any]]
) -> dict:
    """
    Create a user account

    Args:
        session: Database session
        fields: name, email and password

    Returns:
        Public profile of the new user (no token is issued)

    Raises:
        ValidationError: Missing/malformed fields or email already registered
    """
    data = validate_fields(UserRegister, fields)

    if get_user_by_email(session, data.email):
        raise ValidationError("User already exists")

    user = User(
        name=data.name,
        email=data.email,
        password_hash=hash_password(data.password),
    )
    session.add(user)
    try:
        session.commit()
    except IntegrityError as exc:
        # Lost a race against another registration with the same email
        session.rollback()
        raise ValidationError("User already exists") from exc
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("Failed to register user")
        raise UnexpectedError("Could not create user") from exc
    session.refresh(user)

    logger.info("Registered user %s", user.id)
    return dump_user(user)


def login(
    session: Session, fields: Union[UserLogin, Mapping[str, Any]]
) -> Tuple[str, dict]:
    """
    Check credentials and issue a bearer token

    Returns:
        (token, public profile)

    Raises:
        ValidationError: email or password missing
        AuthError: Unknown email or wrong password
    """
    data = validate_fields(UserLogin, fields)

    user = get_user_by_email(session, data.email)
    if not user or not verify_password(data.password, user.password_hash):
        logger.info("Rejected login attempt")
        raise AuthError(INVALID_CREDENTIALS)

    token = create_jwt(user.id, user.email)
    logger.info("User %s logged in", user.id)
    return token, dump_user(user)


def verify_token(token: Optional[str]) -> str:
    """
    Resolve a bearer token to the owning user id

    Raises:
        AuthError: Token missing, malformed, tampered with or expired
    """
    if not token:
        raise AuthError("Not authorized, token missing")

    user_id = get_user_id_from_token(token)
    if not user_id:
        logger.info("Rejected invalid or expired token")
        raise AuthError("Invalid or expired token")
    return user_id


def get_current_user(session: Session, token: Optional[str]) -> dict:
    """Public profile of the token's owner"""
    user_id = verify_token(token)
    return get_user_profile(session, user_id)


def get_user_profile(session: Session, user_id: str) -> dict:
    user = session.get(User, user_id)
    if not user:
        raise AuthError("User not found")
    return dump_user(user)
