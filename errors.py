from fastapi import status


class AppError(Exception):
    """Base class for errors that map to a JSON failure response"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """Missing or malformed input"""
    status_code = status.HTTP_400_BAD_REQUEST


class AuthError(AppError):
    """Bad credentials or an invalid/expired token"""
    status_code = status.HTTP_401_UNAUTHORIZED


class NotFoundError(AppError):
    """Resource does not exist for the calling user"""
    status_code = status.HTTP_404_NOT_FOUND


class AuthorizationError(NotFoundError):
    """Resource exists but belongs to another user.

    Subclasses NotFoundError so the API answers with the same 404.
    """


class UnexpectedError(AppError):
    """Persistence failure or any other unhandled problem"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
