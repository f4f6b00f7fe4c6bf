"""Authentication exceptions."""

from src.shared.errors import ErrorCategory, ErrorCode, ServiceError


class AuthenticationException(ServiceError):
    """Base authentication exception."""

    category = ErrorCategory.AUTHENTICATION


class InvalidCredentialsException(AuthenticationException):
    """Raised when email or password is incorrect.

    Unknown emails raise this too, so account existence is not revealed.
    """

    code = ErrorCode.INVALID_CREDENTIALS

    def __init__(self):
        super().__init__("Incorrect email or password")


class InvalidTokenException(AuthenticationException):
    """Base for access and refresh token rejections."""


class InvalidSignatureException(InvalidTokenException):
    """Raised when a JWT fails signature or algorithm verification."""

    code = ErrorCode.INVALID_SIGNATURE


class TokenExpiredException(InvalidTokenException):
    """Raised when a JWT has passed its expiry."""

    code = ErrorCode.TOKEN_EXPIRED

    def __init__(self):
        super().__init__("Token has expired")


class MalformedClaimsException(InvalidTokenException):
    """Raised when required claims are missing or the subject is not a user id."""

    code = ErrorCode.MALFORMED_CLAIMS


class RefreshTokenNotFoundException(InvalidTokenException):
    """Raised when a refresh token is unknown, expired or revoked."""

    code = ErrorCode.TOKEN_NOT_FOUND

    def __init__(self):
        super().__init__("Refresh token not found or expired")


class UnknownProviderException(ServiceError):
    """Raised when no OAuth client is configured for the provider name."""

    code = ErrorCode.UNKNOWN_PROVIDER
    category = ErrorCategory.VALIDATION

    def __init__(self, provider: str):
        super().__init__(f"OAuth provider not configured: {provider}")
        self.provider = provider


class OAuthExchangeException(AuthenticationException):
    """Raised when the provider rejects the code or the email lookup fails."""

    code = ErrorCode.OAUTH_EXCHANGE_FAILED


class SigningException(ServiceError):
    """Raised when an access token cannot be signed."""

    code = ErrorCode.SIGNING_ERROR
    category = ErrorCategory.INFRASTRUCTURE


class HashingException(ServiceError):
    """Raised when a password cannot be hashed."""

    code = ErrorCode.HASHING_ERROR
    category = ErrorCategory.INFRASTRUCTURE


class PasswordMismatchException(AuthenticationException):
    """Raised by the hasher when a password does not match its digest."""

    code = ErrorCode.INVALID_CREDENTIALS

    def __init__(self):
        super().__init__("Password does not match")


class DeliveryFailedException(ServiceError):
    """Raised when the verification email cannot be delivered."""

    code = ErrorCode.DELIVERY_FAILED
    category = ErrorCategory.INFRASTRUCTURE
