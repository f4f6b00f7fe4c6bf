"""Authentication router (credential and token endpoints)."""

import logging

from fastapi import APIRouter, Depends, status

from .dependencies import get_bearer_token, get_credential_service
from .schemas import (
    AccessTokenResponse,
    ConfirmCodeRequest,
    ConfirmCodeResponse,
    LoginRequest,
    LogoutRequest,
    MessageResponse,
    OAuthExchangeRequest,
    RefreshTokenRequest,
    SignUpRequest,
    TokenPairResponse,
    ValidateTokenResponse,
    VerifyEmailResponse,
)
from .service import CredentialService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["Authentication"])


def _expires_in(service: CredentialService) -> int:
    return int(service.tokens.access_ttl.total_seconds())


@router.post("/signup", response_model=TokenPairResponse, status_code=status.HTTP_201_CREATED)
async def sign_up(data: SignUpRequest, service: CredentialService = Depends(get_credential_service)):
    """Register and log in on the given device.

    - **email**: Email address
    - **password**: Password (8 to 64 characters)
    - **fingerprint**: Device identifier the refresh token is bound to
    """
    await service.sign_up(data.email, data.password)
    pair = await service.login(data.email, data.password, data.fingerprint)
    return TokenPairResponse.from_pair(pair, _expires_in(service))


@router.post("/login", response_model=TokenPairResponse)
async def login(data: LoginRequest, service: CredentialService = Depends(get_credential_service)):
    """Login and get an access/refresh token pair."""
    pair = await service.login(data.email, data.password, data.fingerprint)
    return TokenPairResponse.from_pair(pair, _expires_in(service))


@router.post("/logout", response_model=MessageResponse)
async def logout(
    data: LogoutRequest,
    access_token: str = Depends(get_bearer_token),
    service: CredentialService = Depends(get_credential_service),
):
    """Revoke the refresh token for this device. Repeating it is harmless."""
    await service.logout(access_token, data.fingerprint)
    return MessageResponse(message="Successfully logged out")


@router.post("/refresh", response_model=AccessTokenResponse)
async def refresh_token(data: RefreshTokenRequest, service: CredentialService = Depends(get_credential_service)):
    """Get a new access token. The refresh token stays valid until it expires or is revoked."""
    access_token = await service.refresh_access_token(data.refresh_token, data.fingerprint)
    return AccessTokenResponse(access_token=access_token, expires_in=_expires_in(service))


@router.get("/validate", response_model=ValidateTokenResponse)
async def validate_token(
    access_token: str = Depends(get_bearer_token),
    service: CredentialService = Depends(get_credential_service),
):
    user_id = await service.validate_access_token(access_token)
    return ValidateTokenResponse(user_id=user_id)


@router.post("/verify-email", response_model=VerifyEmailResponse)
async def verify_email(
    access_token: str = Depends(get_bearer_token),
    service: CredentialService = Depends(get_credential_service),
):
    """Email a verification code to the current user."""
    result = await service.verify_email(access_token)
    return VerifyEmailResponse.from_result(result)


@router.post("/confirm-code", response_model=ConfirmCodeResponse)
async def confirm_code(
    data: ConfirmCodeRequest,
    access_token: str = Depends(get_bearer_token),
    service: CredentialService = Depends(get_credential_service),
):
    """Confirm a verification code.

    Expired and incorrect codes return 200 with ``success`` false.
    """
    result = await service.confirm_code(access_token, data.code)
    return ConfirmCodeResponse.from_result(result)


@router.post("/oauth/{provider}", response_model=TokenPairResponse)
async def oauth_exchange(
    provider: str,
    data: OAuthExchangeRequest,
    service: CredentialService = Depends(get_credential_service),
):
    """Exchange an OAuth authorization code for a token pair."""
    pair = await service.exchange_oauth_code(data.code, provider, data.fingerprint)
    return TokenPairResponse.from_pair(pair, _expires_in(service))
