from fastapi import Request
from errors import AuthError
from services.auth import verify_token


def extract_bearer_token(request: Request) -> str:
    """
    Read the token from an "Authorization: Bearer <token>" header

    Raises:
        AuthError: If the header is missing or not a bearer credential
    """
    auth_header = request.headers.get("Authorization")

    if not auth_header:
        raise AuthError("Not authorized, token missing")

    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise AuthError("Invalid Authorization header format. Expected: Bearer <token>")

    return parts[1]


async def get_current_user_id(request: Request) -> str:
    """
    Dependency that verifies the bearer token in the Authorization header

    Args:
        request: FastAPI request object

    Returns:
        Id of the authenticated user

    Raises:
        AuthError: If token is missing, invalid, or expired
    """
    return verify_token(extract_bearer_token(request))
