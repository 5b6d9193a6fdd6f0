import os
from passlib.context import CryptContext
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

pwd_context = CryptContext(
    schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS
)


def hash_password(password: str) -> str:
    """Hash a plaintext password using bcrypt"""
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """
    Check a password against a stored hash

    Returns:
        False for a wrong password or a hash passlib cannot identify
    """
    try:
        return pwd_context.verify(password, password_hash)
    except ValueError:
        return False
