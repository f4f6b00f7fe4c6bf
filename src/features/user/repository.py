"""User record store."""

import logging
from datetime import UTC, datetime
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.logging_config import redact_email

from .exceptions import UserAlreadyExists, UserNotFound
from .models import User

logger = logging.getLogger(__name__)


class UserRecordStore(Protocol):
    """Create/read contract the credential service depends on."""

    async def create_user(self, email: str, password_hash: str | None) -> int: ...

    async def get_user_by_email(self, email: str) -> User: ...

    async def get_user_by_id(self, user_id: int) -> User: ...

    async def mark_email_verified(self, user_id: int) -> None: ...


class UserRepository:
    """PostgreSQL-backed user record store.

    Writes are flushed, not committed; the session owner commits.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_user(self, email: str, password_hash: str | None) -> int:
        """Insert a user and return its id.

        Args:
            email: Unique email address
            password_hash: Encoded hash, or None for a passwordless account

        Returns:
            The new user id

        Raises:
            UserAlreadyExists: If the email is already registered

        """
        user = User(email=email, password_hash=password_hash, email_verified=False)
        try:
            async with self.session.begin_nested():
                self.session.add(user)
                await self.session.flush()
        except IntegrityError as err:
            logger.warning(f"Duplicate registration attempt: {redact_email(email)}")
            raise UserAlreadyExists() from err

        logger.info(f"New user registered: {user.id}")
        return user.id

    async def get_user_by_email(self, email: str) -> User:
        stmt = select(User).where(User.email == email)
        result = await self.session.execute(stmt)
        user = result.scalar_one_or_none()
        if user is None:
            raise UserNotFound(redact_email(email))
        return user

    async def get_user_by_id(self, user_id: int) -> User:
        stmt = select(User).where(User.id == user_id)
        result = await self.session.execute(stmt)
        user = result.scalar_one_or_none()
        if user is None:
            raise UserNotFound(user_id)
        return user

    async def mark_email_verified(self, user_id: int) -> None:
        user = await self.get_user_by_id(user_id)
        user.email_verified = True
        user.updated_at = datetime.now(UTC)
        await self.session.flush()
        logger.info(f"Email verified for user {user_id}")
