"""User-related exceptions."""

from src.shared.errors import ErrorCategory, ErrorCode, ServiceError


class UserException(ServiceError):
    """Base user exception."""


class UserNotFound(UserException):
    """Raised when no user matches the lookup key."""

    code = ErrorCode.USER_NOT_FOUND
    category = ErrorCategory.AUTHENTICATION

    def __init__(self, key: str | int = "user"):
        super().__init__(f"User not found: {key}")


class UserAlreadyExists(UserException):
    """Raised when the email is already registered."""

    code = ErrorCode.USER_EXISTS
    category = ErrorCategory.CONFLICT

    def __init__(self):
        super().__init__("Email already registered")
