"""Session and verification code stores over a shared key-value backend.

Both stores live in one physical backend under distinct key prefixes:

- ``session:token:<token>:<fingerprint>`` -> user id (refresh token lookup)
- ``session:devices:<user_id>`` -> set of ``<token>:<fingerprint>`` members
- ``verification:code:<user_id>`` -> six digit code
"""

import logging
from datetime import timedelta

from src.cache.store import KeyValueStore
from src.shared.errors import CorruptRecord

logger = logging.getLogger(__name__)


class SessionStore:
    """Refresh token reverse lookups plus a per-user index of active tokens.

    The per-user set is an auxiliary index: members may outlive their lookup
    entry and are skipped or cleaned up without error.
    """

    def __init__(self, store: KeyValueStore, prefix: str = "session"):
        self.store = store
        self.prefix = prefix

    @staticmethod
    def member(token: str, fingerprint: str) -> str:
        return f"{token}:{fingerprint}"

    def lookup_key(self, token: str, fingerprint: str) -> str:
        return f"{self.prefix}:token:{self.member(token, fingerprint)}"

    def devices_key(self, user_id: int) -> str:
        return f"{self.prefix}:devices:{user_id}"

    async def save(self, user_id: int, token: str, fingerprint: str, ttl: timedelta) -> None:
        """Persist the lookup entry, index it, then extend the index expiry.

        The three writes are independent; a failure part way leaves either an
        unindexed entry or a stale index member, both tolerated.
        """
        devices_key = self.devices_key(user_id)
        await self.store.set(self.lookup_key(token, fingerprint), str(user_id), ttl)
        await self.store.add_to_set(devices_key, self.member(token, fingerprint))
        await self.store.set_expiry(devices_key, ttl)

    async def user_id(self, token: str, fingerprint: str) -> str | None:
        """Return the stored user id, or None if absent or expired."""
        return await self.store.get(self.lookup_key(token, fingerprint))

    async def revoke(self, user_id: int, fingerprint: str) -> int:
        """Delete every token of the user bound to the fingerprint.

        Returns:
            Number of index members removed (0 when nothing matched)

        """
        devices_key = self.devices_key(user_id)
        removed = 0
        for member in await self.store.members_of(devices_key):
            _, sep, member_fingerprint = member.partition(":")
            if not sep or member_fingerprint != fingerprint:
                continue
            await self.store.delete(f"{self.prefix}:token:{member}")
            await self.store.remove_from_set(devices_key, member)
            removed += 1
        return removed


class VerificationCodeStore:
    """One verification code per user; writes overwrite."""

    def __init__(self, store: KeyValueStore, prefix: str = "verification"):
        self.store = store
        self.prefix = prefix

    def code_key(self, user_id: int) -> str:
        return f"{self.prefix}:code:{user_id}"

    async def save(self, user_id: int, code: int, ttl: timedelta) -> None:
        await self.store.set(self.code_key(user_id), str(code), ttl)

    async def get(self, user_id: int) -> int | None:
        raw = await self.store.get(self.code_key(user_id))
        if raw is None:
            return None
        try:
            return int(raw)
        except ValueError as err:
            logger.error(f"Unparseable verification code stored for user {user_id}")
            raise CorruptRecord("Stored verification code is not an integer") from err

    async def delete(self, user_id: int) -> None:
        await self.store.delete(self.code_key(user_id))
