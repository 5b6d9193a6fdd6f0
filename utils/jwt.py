import jwt
import os
from datetime import datetime, timedelta, timezone
from typing import Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

SECRET_KEY = os.getenv("JWT_SECRET")

if not SECRET_KEY:
    raise ValueError("JWT_SECRET environment variable is not set")

ALGORITHM = "HS256"
TOKEN_EXPIRE_HOURS = float(os.getenv("TOKEN_EXPIRE_HOURS", "24"))


def create_jwt(user_id: str, email: str, expires_in: Optional[timedelta] = None) -> str:
    """
    Issue a signed token for a user

    Args:
        user_id: Stored as the "sub" claim
        email: Stored as the "email" claim
        expires_in: Token lifetime, TOKEN_EXPIRE_HOURS by default

    Returns:
        Encoded JWT string
    """
    now = datetime.now(timezone.utc)
    if expires_in is None:
        expires_in = timedelta(hours=TOKEN_EXPIRE_HOURS)
    payload = {
        "sub": user_id,
        "email": email,
        "iat": now,
        "exp": now + expires_in,
    }
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def verify_jwt(token: str) -> Optional[dict]:
    """
    Verify JWT token and return payload

    Args:
        token: JWT token string

    Returns:
        Decoded payload if valid, None otherwise
    """
    try:
        # Signature and "exp" are both checked by PyJWT
        return jwt.decode(
            token, SECRET_KEY, algorithms=[ALGORITHM], options={"require": ["exp", "sub"]}
        )
    except jwt.InvalidTokenError:
        return None


def get_user_id_from_token(token: str) -> Optional[str]:
    """
    Extract user ID from JWT token

    Args:
        token: JWT token string

    Returns:
        User ID if valid token, None otherwise
    """
    payload = verify_jwt(token)
    if payload:
        return payload.get("sub")  # Subject is user ID
    return None
