"""Authentication dependencies for FastAPI.

Each component is built per request from settings, so the core never reads
process-wide configuration itself.
"""

from functools import lru_cache

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from src.cache.client import get_redis
from src.cache.store import KeyValueStore, RedisKeyValueStore
from src.config.settings import settings
from src.database.dependencies import get_db_session
from src.features.user.repository import UserRecordStore, UserRepository

from .email import EmailSender, SMTPEmailSender
from .hasher import CredentialHasher
from .oauth import OAuthManager
from .service import CredentialService
from .stores import SessionStore, VerificationCodeStore
from .tokens import TokenManager
from .verification import VerificationManager

security = HTTPBearer()


def get_key_value_store() -> KeyValueStore:
    """Shared backend for sessions and verification codes."""
    return RedisKeyValueStore(get_redis())


async def get_user_store(session: AsyncSession = Depends(get_db_session)) -> UserRecordStore:
    return UserRepository(session)


@lru_cache
def get_email_sender() -> EmailSender:
    return SMTPEmailSender(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_username,
        password=settings.smtp_password,
        from_email=settings.smtp_from_email,
        use_tls=settings.smtp_use_tls,
    )


@lru_cache
def get_oauth_manager() -> OAuthManager:
    return OAuthManager.from_settings(settings)


@lru_cache
def get_hasher() -> CredentialHasher:
    return CredentialHasher()


def get_token_manager(store: KeyValueStore = Depends(get_key_value_store)) -> TokenManager:
    return TokenManager(
        SessionStore(store),
        secret=settings.secret_key,
        access_ttl=settings.access_token_ttl,
        refresh_ttl=settings.refresh_token_ttl,
        algorithm=settings.jwt_algorithm,
    )


def get_verification_manager(
    store: KeyValueStore = Depends(get_key_value_store),
    sender: EmailSender = Depends(get_email_sender),
) -> VerificationManager:
    return VerificationManager(VerificationCodeStore(store), sender, settings.email_code_ttl)


def get_credential_service(
    users: UserRecordStore = Depends(get_user_store),
    hasher: CredentialHasher = Depends(get_hasher),
    tokens: TokenManager = Depends(get_token_manager),
    verification: VerificationManager = Depends(get_verification_manager),
    oauth: OAuthManager = Depends(get_oauth_manager),
) -> CredentialService:
    return CredentialService(users, hasher, tokens, verification, oauth)


async def get_bearer_token(credentials: HTTPAuthorizationCredentials = Depends(security)) -> str:
    """Raw access token from the Authorization header."""
    return credentials.credentials
