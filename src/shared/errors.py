"""Service error taxonomy shared by every feature.

Callers branch on ``code`` and ``category``, never on exception identity.
The HTTP layer maps ``category`` to a status code and a public detail.
"""

from enum import StrEnum


class ErrorCategory(StrEnum):
    """Coarse error groups, each mapped to a single HTTP status."""

    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    CONFLICT = "conflict"
    INFRASTRUCTURE = "infrastructure"


class ErrorCode(StrEnum):
    """Semantic error tags."""

    INVALID_CREDENTIALS = "invalid_credentials"
    INVALID_SIGNATURE = "invalid_signature"
    TOKEN_EXPIRED = "token_expired"
    MALFORMED_CLAIMS = "malformed_claims"
    TOKEN_NOT_FOUND = "token_not_found"
    OAUTH_EXCHANGE_FAILED = "oauth_exchange_failed"
    USER_NOT_FOUND = "user_not_found"
    USER_EXISTS = "user_exists"
    UNKNOWN_PROVIDER = "unknown_provider"
    STORE_UNAVAILABLE = "store_unavailable"
    DELIVERY_FAILED = "delivery_failed"
    SIGNING_ERROR = "signing_error"
    HASHING_ERROR = "hashing_error"
    CORRUPT_RECORD = "corrupt_record"


class ServiceError(Exception):
    """Base class for all domain errors."""

    code: ErrorCode
    category: ErrorCategory

    def __init__(self, message: str | None = None):
        super().__init__(message or self.code.value.replace("_", " "))
        self.message = str(self)


class StoreUnavailable(ServiceError):
    """Raised when the key-value backend cannot be read or written."""

    code = ErrorCode.STORE_UNAVAILABLE
    category = ErrorCategory.INFRASTRUCTURE


class CorruptRecord(ServiceError):
    """Raised when a stored value cannot be parsed back into its type."""

    code = ErrorCode.CORRUPT_RECORD
    category = ErrorCategory.INFRASTRUCTURE
