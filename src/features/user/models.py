"""User domain models."""

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.database.base import Base, TimestampMixin


class User(Base, TimestampMixin):
    """User record.

    Accounts created through OAuth have no password hash and cannot sign in
    with a password.
    """

    __tablename__ = "users"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Identity (globally unique)
    email: Mapped[str] = mapped_column(String(254), nullable=False, unique=True, index=True)

    # Authentication
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Status
    email_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")

    @property
    def has_password(self) -> bool:
        """Computed property: false for passwordless (OAuth) accounts."""
        return self.password_hash is not None
