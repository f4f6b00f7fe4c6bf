"""Authentication schemas (DTOs)."""

from typing import Annotated

from pydantic import BaseModel, EmailStr, Field, field_validator

from src.shared.validators.password import validate_password_policy

from .models import ConfirmCodeResult, TokenPair, VerifyEmailResult
from .verification import CODE_MAX, CODE_MIN

Fingerprint = Annotated[str, Field(min_length=1, max_length=256, description="Client device/browser identifier")]


# Request schemas
class SignUpRequest(BaseModel):
    """Sign-up request. The new user is logged in on the given device.

    Note: Uses email-validator library via Pydantic's EmailStr for RFC 5322 compliant email validation.
    """

    email: EmailStr
    password: str = Field(..., description="Password (8 to 64 characters)")
    fingerprint: Fingerprint

    @field_validator("password")
    @classmethod
    def check_password_policy(cls, value: str) -> str:
        """Validate password length using shared validator."""
        return validate_password_policy(value)


class LoginRequest(BaseModel):
    """Login request.

    Only presence is checked so malformed input fails the same way as wrong credentials.
    """

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    fingerprint: Fingerprint


class LogoutRequest(BaseModel):
    """Logout request; the access token travels in the Authorization header."""

    fingerprint: Fingerprint


class RefreshTokenRequest(BaseModel):
    """Refresh token request."""

    refresh_token: str = Field(..., min_length=1)
    fingerprint: Fingerprint


class ConfirmCodeRequest(BaseModel):
    """Verification code submission."""

    code: int = Field(..., ge=CODE_MIN, le=CODE_MAX, description="Six digit verification code")


class OAuthExchangeRequest(BaseModel):
    """OAuth authorization code exchange."""

    code: str = Field(..., min_length=1)
    fingerprint: Fingerprint


# Response schemas
class TokenPairResponse(BaseModel):
    """Access and refresh token pair."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # access token lifetime, seconds

    @classmethod
    def from_pair(cls, pair: TokenPair, expires_in: int) -> "TokenPairResponse":
        return cls(access_token=pair.access_token, refresh_token=pair.refresh_token, expires_in=expires_in)


class AccessTokenResponse(BaseModel):
    """New access token issued from a refresh token."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int


class ValidateTokenResponse(BaseModel):
    """Access token validation result."""

    user_id: int


class VerifyEmailResponse(BaseModel):
    """Verification code dispatch result."""

    status: str
    code_ttl: int  # seconds

    @classmethod
    def from_result(cls, result: VerifyEmailResult) -> "VerifyEmailResponse":
        return cls(status=result.status, code_ttl=int(result.code_ttl.total_seconds()))


class ConfirmCodeResponse(BaseModel):
    """Verification code confirmation result."""

    success: bool
    message: str

    @classmethod
    def from_result(cls, result: ConfirmCodeResult) -> "ConfirmCodeResponse":
        return cls(success=result.success, message=result.message)


class MessageResponse(BaseModel):
    message: str
