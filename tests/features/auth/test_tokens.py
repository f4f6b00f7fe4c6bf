"""Tests for access and refresh token lifecycle."""

from datetime import UTC, datetime, timedelta

import jwt
import pytest

from src.config.settings import settings
from src.features.auth.exceptions import (
    InvalidSignatureException,
    InvalidTokenException,
    MalformedClaimsException,
    RefreshTokenNotFoundException,
    TokenExpiredException,
)
from src.features.auth.tokens import TokenManager
from src.shared.errors import CorruptRecord, ErrorCategory, ErrorCode

ACCESS_TTL = timedelta(minutes=15)
REFRESH_TTL = timedelta(hours=240)


def _claims(**overrides):
    now = datetime.now(UTC)
    claims = {"sub": "42", "iat": now, "exp": now + timedelta(minutes=5)}
    claims.update(overrides)
    return {key: value for key, value in claims.items() if value is not None}


# TokenManager construction


class TestTokenManagerConfig:
    def test_rejects_empty_secret(self, session_store):
        with pytest.raises(ValueError):
            TokenManager(session_store, secret="", access_ttl=ACCESS_TTL, refresh_ttl=REFRESH_TTL)

    def test_rejects_asymmetric_algorithm(self, session_store):
        with pytest.raises(ValueError):
            TokenManager(session_store, secret="s", access_ttl=ACCESS_TTL, refresh_ttl=REFRESH_TTL, algorithm="RS256")


# Access tokens


class TestAccessTokens:
    """Unit tests for JWT issuance and validation."""

    def test_round_trip(self, token_manager):
        token = token_manager.issue_access_token(42)
        assert token_manager.validate_access_token(token) == 42

    def test_claims_carry_subject_and_lifetime(self, token_manager):
        token = token_manager.issue_access_token(7)
        payload = jwt.decode(token, settings.secret_key, algorithms=["HS256"])
        assert payload["sub"] == "7"
        assert payload["exp"] - payload["iat"] == int(ACCESS_TTL.total_seconds())

    def test_valid_until_expiry(self, token_manager, clock):
        token = token_manager.issue_access_token(42)
        clock.advance(ACCESS_TTL - timedelta(seconds=1))
        assert token_manager.validate_access_token(token) == 42

    def test_expired_token(self, token_manager, clock):
        token = token_manager.issue_access_token(42)
        clock.advance(ACCESS_TTL)

        with pytest.raises(TokenExpiredException) as exc_info:
            token_manager.validate_access_token(token)

        assert exc_info.value.code is ErrorCode.TOKEN_EXPIRED
        assert exc_info.value.category is ErrorCategory.AUTHENTICATION

    def test_token_issued_after_clock_advance_validates(self, token_manager, clock):
        # iat lies ahead of the wall clock but not of the manager clock
        clock.advance(timedelta(hours=3))
        token = token_manager.issue_access_token(42)
        assert token_manager.validate_access_token(token) == 42

    def test_token_expired_by_wall_clock_issuer(self, session_store):
        past = TokenManager(
            session_store,
            secret=settings.secret_key,
            access_ttl=ACCESS_TTL,
            refresh_ttl=REFRESH_TTL,
            now=lambda: datetime.now(UTC) - timedelta(hours=2),
        )
        current = TokenManager(session_store, secret=settings.secret_key, access_ttl=ACCESS_TTL, refresh_ttl=REFRESH_TTL)

        with pytest.raises(TokenExpiredException):
            current.validate_access_token(past.issue_access_token(42))

    def test_non_numeric_expiry(self, token_manager):
        token = jwt.encode(_claims(exp="tomorrow"), settings.secret_key, algorithm="HS256")
        with pytest.raises(MalformedClaimsException):
            token_manager.validate_access_token(token)

    def test_wrong_secret(self, token_manager):
        token = jwt.encode(_claims(), "another-secret", algorithm="HS256")
        with pytest.raises(InvalidSignatureException):
            token_manager.validate_access_token(token)

    def test_different_hmac_algorithm_rejected(self, token_manager):
        token = jwt.encode(_claims(), settings.secret_key, algorithm="HS512")
        with pytest.raises(InvalidSignatureException):
            token_manager.validate_access_token(token)

    def test_unsigned_token_rejected(self, token_manager):
        token = jwt.encode(_claims(), None, algorithm="none")
        with pytest.raises(InvalidSignatureException):
            token_manager.validate_access_token(token)

    def test_garbage_token(self, token_manager):
        with pytest.raises(InvalidSignatureException):
            token_manager.validate_access_token("not-a-jwt")

    def test_tampered_payload(self, token_manager):
        header, _, signature = token_manager.issue_access_token(42).split(".")
        forged_payload = jwt.encode(_claims(sub="1"), settings.secret_key, algorithm="HS256").split(".")[1]
        with pytest.raises(InvalidSignatureException):
            token_manager.validate_access_token(f"{header}.{forged_payload}.{signature}")

    def test_missing_subject(self, token_manager):
        token = jwt.encode(_claims(sub=None), settings.secret_key, algorithm="HS256")
        with pytest.raises(MalformedClaimsException):
            token_manager.validate_access_token(token)

    def test_missing_expiry(self, token_manager):
        token = jwt.encode(_claims(exp=None), settings.secret_key, algorithm="HS256")
        with pytest.raises(MalformedClaimsException):
            token_manager.validate_access_token(token)

    def test_non_numeric_subject(self, token_manager):
        token = jwt.encode(_claims(sub="alice"), settings.secret_key, algorithm="HS256")
        with pytest.raises(MalformedClaimsException) as exc_info:
            token_manager.validate_access_token(token)
        assert exc_info.value.code is ErrorCode.MALFORMED_CLAIMS

    def test_all_rejections_share_a_base(self, token_manager):
        with pytest.raises(InvalidTokenException):
            token_manager.validate_access_token("a.b.c")


# Refresh tokens


class TestRefreshTokens:
    """Unit tests for device-bound refresh tokens."""

    async def test_issue_and_validate(self, token_manager):
        token = await token_manager.issue_refresh_token(42, "device-a")
        assert await token_manager.validate_refresh_token(token, "device-a") == 42

    async def test_tokens_are_unique_and_url_safe(self, token_manager):
        first = await token_manager.issue_refresh_token(42, "device-a")
        second = await token_manager.issue_refresh_token(42, "device-a")
        assert first != second
        assert len(first) >= 43
        assert ":" not in first

    async def test_wrong_fingerprint(self, token_manager):
        token = await token_manager.issue_refresh_token(42, "device-a")
        with pytest.raises(RefreshTokenNotFoundException) as exc_info:
            await token_manager.validate_refresh_token(token, "device-b")
        assert exc_info.value.code is ErrorCode.TOKEN_NOT_FOUND

    async def test_unknown_token(self, token_manager):
        with pytest.raises(RefreshTokenNotFoundException):
            await token_manager.validate_refresh_token("never-issued", "device-a")

    async def test_expires_after_ttl(self, token_manager, clock):
        token = await token_manager.issue_refresh_token(42, "device-a")

        clock.advance(REFRESH_TTL - timedelta(seconds=1))
        assert await token_manager.validate_refresh_token(token, "device-a") == 42

        clock.advance(timedelta(seconds=1))
        with pytest.raises(RefreshTokenNotFoundException):
            await token_manager.validate_refresh_token(token, "device-a")

    async def test_revoke(self, token_manager):
        token = await token_manager.issue_refresh_token(42, "device-a")

        assert await token_manager.revoke_refresh_token(42, "device-a") == 1

        with pytest.raises(RefreshTokenNotFoundException):
            await token_manager.validate_refresh_token(token, "device-a")

    async def test_revoke_is_idempotent(self, token_manager):
        await token_manager.issue_refresh_token(42, "device-a")
        await token_manager.revoke_refresh_token(42, "device-a")
        assert await token_manager.revoke_refresh_token(42, "device-a") == 0

    async def test_revoke_unknown_fingerprint_is_noop(self, token_manager):
        assert await token_manager.revoke_refresh_token(42, "never-seen") == 0

    async def test_revoke_leaves_other_devices(self, token_manager):
        token_a = await token_manager.issue_refresh_token(42, "device-a")
        token_b = await token_manager.issue_refresh_token(42, "device-b")

        await token_manager.revoke_refresh_token(42, "device-a")

        with pytest.raises(RefreshTokenNotFoundException):
            await token_manager.validate_refresh_token(token_a, "device-a")
        assert await token_manager.validate_refresh_token(token_b, "device-b") == 42

    async def test_revoke_removes_every_token_for_fingerprint(self, token_manager):
        first = await token_manager.issue_refresh_token(42, "device-a")
        second = await token_manager.issue_refresh_token(42, "device-a")

        assert await token_manager.revoke_refresh_token(42, "device-a") == 2

        for token in (first, second):
            with pytest.raises(RefreshTokenNotFoundException):
                await token_manager.validate_refresh_token(token, "device-a")

    async def test_revoke_leaves_other_users(self, token_manager):
        token = await token_manager.issue_refresh_token(7, "device-a")
        await token_manager.revoke_refresh_token(42, "device-a")
        assert await token_manager.validate_refresh_token(token, "device-a") == 7

    async def test_fingerprint_suffix_does_not_collide(self, token_manager):
        token = await token_manager.issue_refresh_token(42, "laptop:b")

        assert await token_manager.revoke_refresh_token(42, "b") == 0
        assert await token_manager.validate_refresh_token(token, "laptop:b") == 42

    async def test_device_index_tracks_tokens(self, token_manager, session_store, kv_store):
        token = await token_manager.issue_refresh_token(42, "device-a")
        members = await kv_store.members_of(session_store.devices_key(42))
        assert members == {session_store.member(token, "device-a")}

    async def test_corrupt_user_id(self, token_manager, session_store, kv_store):
        await kv_store.set(session_store.lookup_key("tok", "device-a"), "not-a-number", REFRESH_TTL)

        with pytest.raises(CorruptRecord) as exc_info:
            await token_manager.validate_refresh_token("tok", "device-a")

        assert exc_info.value.category is ErrorCategory.INFRASTRUCTURE
