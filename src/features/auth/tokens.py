"""Access (JWT) and refresh token lifecycle."""

import logging
import secrets
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import jwt
from jwt.exceptions import (
    InvalidSubjectError,
    InvalidTokenError,
    MissingRequiredClaimError,
    PyJWTError,
)

from src.shared.errors import CorruptRecord

from .exceptions import (
    InvalidSignatureException,
    MalformedClaimsException,
    RefreshTokenNotFoundException,
    SigningException,
    TokenExpiredException,
)
from .stores import SessionStore

logger = logging.getLogger(__name__)

# 32 bytes = 256 bits of entropy
REFRESH_TOKEN_BYTES = 32


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TokenManager:
    """Mints and verifies access and refresh tokens.

    Access tokens are stateless HS256 JWTs. Refresh tokens are opaque random
    strings whose validity is the existence of their session store entry.
    """

    def __init__(
        self,
        sessions: SessionStore,
        *,
        secret: str,
        access_ttl: timedelta,
        refresh_ttl: timedelta,
        algorithm: str = "HS256",
        now: Callable[[], datetime] = _utcnow,
    ):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        if not algorithm.startswith("HS"):
            raise ValueError(f"Only symmetric HMAC algorithms are supported, got {algorithm}")
        self.sessions = sessions
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self._secret = secret
        self._algorithm = algorithm
        self._now = now

    def issue_access_token(self, user_id: int) -> str:
        """Create a signed access token for a user.

        Args:
            user_id: Subject of the token

        Returns:
            Encoded JWT token string

        Raises:
            SigningException: If the token cannot be encoded

        """
        issued_at = self._now()
        claims = {
            "sub": str(user_id),
            "iat": issued_at,
            "exp": issued_at + self.access_ttl,
        }
        try:
            return jwt.encode(claims, self._secret, algorithm=self._algorithm)
        except (PyJWTError, TypeError, ValueError) as err:
            logger.error(f"Failed to sign access token for user {user_id}: {err}")
            raise SigningException("Failed to sign access token") from err

    def validate_access_token(self, token: str) -> int:
        """Verify an access token and return its user id.

        Only the configured algorithm is accepted, so a token declaring
        ``none`` or an asymmetric algorithm is rejected as a bad signature.

        Raises:
            TokenExpiredException: If the token has expired
            MalformedClaimsException: If claims are missing or the subject is not an integer
            InvalidSignatureException: For any other verification failure

        """
        # Time claims are checked against the manager clock below
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "iat", "exp"], "verify_exp": False, "verify_iat": False},
            )
        except (MissingRequiredClaimError, InvalidSubjectError) as err:
            raise MalformedClaimsException(str(err)) from err
        except InvalidTokenError as err:
            logger.warning(f"Rejected access token: {err}")
            raise InvalidSignatureException("Invalid token signature") from err

        expires_at = payload["exp"]
        if isinstance(expires_at, bool) or not isinstance(expires_at, int | float):
            raise MalformedClaimsException("Token expiry is not a timestamp")
        if expires_at <= self._now().timestamp():
            raise TokenExpiredException()

        try:
            return int(payload["sub"])
        except (TypeError, ValueError) as err:
            raise MalformedClaimsException("Token subject is not a user id") from err

    async def issue_refresh_token(self, user_id: int, fingerprint: str) -> str:
        """Create a refresh token bound to one device fingerprint.

        Raises:
            StoreUnavailable: If the session store cannot be written

        """
        token = secrets.token_urlsafe(REFRESH_TOKEN_BYTES)
        await self.sessions.save(user_id, token, fingerprint, self.refresh_ttl)
        logger.info(f"Issued refresh token for user {user_id}")
        return token

    async def validate_refresh_token(self, token: str, fingerprint: str) -> int:
        """Resolve a refresh token to its user id.

        Expiry is enforced by the store, so an expired token reads as absent.

        Raises:
            RefreshTokenNotFoundException: If no live entry exists
            CorruptRecord: If the stored user id cannot be parsed

        """
        raw_user_id = await self.sessions.user_id(token, fingerprint)
        if raw_user_id is None:
            raise RefreshTokenNotFoundException()
        try:
            return int(raw_user_id)
        except ValueError as err:
            logger.error("Refresh token entry holds a non-integer user id")
            raise CorruptRecord("Stored user id is not an integer") from err

    async def revoke_refresh_token(self, user_id: int, fingerprint: str) -> int:
        """Delete the user's refresh token(s) for a fingerprint.

        Revoking an unknown fingerprint is a no-op.

        Returns:
            Number of tokens revoked

        """
        revoked = await self.sessions.revoke(user_id, fingerprint)
        logger.info(f"Revoked {revoked} refresh token(s) for user {user_id}")
        return revoked
