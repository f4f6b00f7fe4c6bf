"""Authentication service layer."""

import logging

from src.config.logging_config import redact_email
from src.features.user.exceptions import UserAlreadyExists, UserNotFound
from src.features.user.repository import UserRecordStore
from src.shared.validators.email import normalize_email

from .exceptions import InvalidCredentialsException, PasswordMismatchException
from .hasher import CredentialHasher
from .models import ConfirmCodeResult, TokenPair, VerifyEmailResult
from .oauth import OAuthManager
from .tokens import TokenManager
from .verification import VerificationManager

logger = logging.getLogger(__name__)


class CredentialService:
    """User-facing credential operations.

    Composes the token and verification managers, the password hasher and the
    user record store. Infrastructure errors propagate unchanged; nothing is
    retried here.
    """

    def __init__(
        self,
        users: UserRecordStore,
        hasher: CredentialHasher,
        tokens: TokenManager,
        verification: VerificationManager,
        oauth: OAuthManager,
    ):
        self.users = users
        self.hasher = hasher
        self.tokens = tokens
        self.verification = verification
        self.oauth = oauth

    async def sign_up(self, email: str, password: str) -> int:
        """Register a new user.

        Args:
            email: Email address (validated upstream)
            password: Plain text password (validated upstream)

        Returns:
            The new user id

        Raises:
            UserAlreadyExists: If the email is already registered

        """
        password_hash = self.hasher.hash(password)
        user_id = await self.users.create_user(normalize_email(email), password_hash)
        logger.info(f"User signed up: {user_id}")
        return user_id

    async def login(self, email: str, password: str, fingerprint: str) -> TokenPair:
        """Authenticate with email and password and issue a token pair.

        Raises:
            InvalidCredentialsException: If the email is unknown or the password is wrong

        """
        email = normalize_email(email)
        try:
            user = await self.users.get_user_by_email(email)
        except UserNotFound as err:
            logger.warning(f"Login attempt for unknown email: {redact_email(email)}")
            raise InvalidCredentialsException() from err

        if not user.has_password:
            logger.warning(f"Password login attempt for passwordless user {user.id}")
            raise InvalidCredentialsException()

        try:
            self.hasher.verify(password, user.password_hash)
        except PasswordMismatchException as err:
            logger.warning(f"Login attempt with wrong password for user {user.id}")
            raise InvalidCredentialsException() from err

        pair = await self._issue_pair(user.id, fingerprint)
        logger.info(f"User logged in: {user.id}")
        return pair

    async def logout(self, access_token: str, fingerprint: str) -> None:
        """Revoke the refresh token bound to the fingerprint of the token's user."""
        user_id = self.tokens.validate_access_token(access_token)
        await self.tokens.revoke_refresh_token(user_id, fingerprint)
        logger.info(f"User logged out: {user_id}")

    async def refresh_access_token(self, refresh_token: str, fingerprint: str) -> str:
        """Issue a new access token. The refresh token is not rotated."""
        user_id = await self.tokens.validate_refresh_token(refresh_token, fingerprint)
        access_token = self.tokens.issue_access_token(user_id)
        logger.info(f"Access token refreshed for user {user_id}")
        return access_token

    async def validate_access_token(self, access_token: str) -> int:
        return self.tokens.validate_access_token(access_token)

    async def verify_email(self, access_token: str) -> VerifyEmailResult:
        """Issue a verification code for the token's user and email it.

        If delivery fails the error propagates but the code stays stored.
        """
        user_id = self.tokens.validate_access_token(access_token)
        user = await self.users.get_user_by_id(user_id)

        code = await self.verification.issue_code(user_id)
        await self.verification.send_code(user.email, code)

        logger.info(f"Verification code sent for user {user_id}")
        return VerifyEmailResult(status="code sent", code_ttl=self.verification.code_ttl)

    async def confirm_code(self, access_token: str, code: int) -> ConfirmCodeResult:
        """Confirm a verification code and mark the email verified on success."""
        user_id = self.tokens.validate_access_token(access_token)
        result = await self.verification.confirm_code(user_id, code)
        if result.success:
            await self.users.mark_email_verified(user_id)
        return result

    async def exchange_oauth_code(self, code: str, provider: str, fingerprint: str) -> TokenPair:
        """Sign in through an OAuth provider.

        Unknown emails get a new passwordless account.

        Raises:
            UnknownProviderException: If the provider has no configured client
            OAuthExchangeException: If the provider rejects the code or the email lookup fails

        """
        client = self.oauth.provider(provider)
        provider_token = await client.exchange_code(code)
        email = normalize_email(await client.fetch_verified_email(provider_token))

        try:
            user_id = (await self.users.get_user_by_email(email)).id
        except UserNotFound:
            user_id = await self._create_oauth_user(email, provider)

        pair = await self._issue_pair(user_id, fingerprint)
        logger.info(f"User {user_id} logged in via {provider}")
        return pair

    async def _create_oauth_user(self, email: str, provider: str) -> int:
        try:
            user_id = await self.users.create_user(email, None)
        except UserAlreadyExists:
            # A concurrent sign-in created the account after our lookup
            return (await self.users.get_user_by_email(email)).id
        logger.info(f"Created passwordless user {user_id} via {provider}")
        return user_id

    async def _issue_pair(self, user_id: int, fingerprint: str) -> TokenPair:
        access_token = self.tokens.issue_access_token(user_id)
        refresh_token = await self.tokens.issue_refresh_token(user_id, fingerprint)
        return TokenPair(access_token=access_token, refresh_token=refresh_token)
