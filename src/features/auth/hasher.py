"""Password hashing."""

from argon2.exceptions import HashingError
from pwdlib import PasswordHash
from pwdlib.exceptions import UnknownHashError

from .exceptions import HashingException, PasswordMismatchException


class CredentialHasher:
    """One-way password hashing using Argon2.

    Salt is generated per call and embedded in the returned hash.
    """

    def __init__(self, password_hash: PasswordHash | None = None):
        self._hasher = password_hash or PasswordHash.recommended()

    def hash(self, password: str) -> str:
        """Hash a password.

        Raises:
            HashingException: If Argon2 fails or memory is exhausted

        """
        try:
            return self._hasher.hash(password)
        except (HashingError, MemoryError) as err:
            raise HashingException("Failed to hash password") from err

    def verify(self, password: str, digest: str | None) -> None:
        """Verify a password against its digest.

        A missing digest (passwordless account) never matches.

        Raises:
            PasswordMismatchException: If the password does not match

        """
        if not digest:
            raise PasswordMismatchException()
        try:
            matches = self._hasher.verify(password, digest)
        except UnknownHashError as err:
            raise PasswordMismatchException() from err
        if not matches:
            raise PasswordMismatchException()
