"""Third-party OAuth code exchange."""

import logging
from typing import Protocol

import httpx

from .exceptions import OAuthExchangeException, UnknownProviderException

logger = logging.getLogger(__name__)


class OAuthProvider(Protocol):
    """Exchange an authorization code and resolve the user's verified email."""

    name: str

    async def exchange_code(self, code: str) -> str: ...

    async def fetch_verified_email(self, access_token: str) -> str: ...


class GitHubOAuthProvider:
    """GitHub OAuth app client."""

    name = "github"
    token_url = "https://github.com/login/oauth/access_token"
    emails_url = "https://api.github.com/user/emails"

    def __init__(self, client_id: str, client_secret: str, redirect_url: str, timeout: float = 30.0):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_url = redirect_url
        self.timeout = timeout

    async def exchange_code(self, code: str) -> str:
        """Trade an authorization code for a provider access token.

        Raises:
            OAuthExchangeException: If GitHub rejects the code or cannot be reached

        """
        data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
            "redirect_uri": self.redirect_url,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=False) as client:
                response = await client.post(self.token_url, data=data, headers={"Accept": "application/json"})
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError) as err:
            logger.error(f"GitHub code exchange failed: {err}")
            raise OAuthExchangeException("Failed to exchange authorization code") from err

        # GitHub reports bad codes with a 200 and an "error" field
        access_token = payload.get("access_token")
        if not access_token:
            logger.warning(f"GitHub code exchange rejected: {payload.get('error', 'no access_token')}")
            raise OAuthExchangeException("Authorization code was rejected")
        return access_token

    async def fetch_verified_email(self, access_token: str) -> str:
        """Return the account's primary verified email.

        Raises:
            OAuthExchangeException: If the lookup fails or no such email exists

        """
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/vnd.github.v3+json",
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=False) as client:
                response = await client.get(self.emails_url, headers=headers)
                response.raise_for_status()
                emails = response.json()
        except (httpx.HTTPError, ValueError) as err:
            logger.error(f"GitHub email lookup failed: {err}")
            raise OAuthExchangeException("Failed to fetch email from provider") from err

        for entry in emails:
            if entry.get("primary") and entry.get("verified"):
                return entry["email"]

        raise OAuthExchangeException("No primary verified email found")


class OAuthManager:
    """Registry of configured OAuth providers by name."""

    def __init__(self, providers: list[OAuthProvider] | None = None):
        self._providers = {provider.name: provider for provider in providers or []}

    @classmethod
    def from_settings(cls, settings) -> "OAuthManager":
        providers: list[OAuthProvider] = []
        if settings.github_client_id and settings.github_client_secret:
            providers.append(
                GitHubOAuthProvider(
                    client_id=settings.github_client_id,
                    client_secret=settings.github_client_secret,
                    redirect_url=settings.github_redirect_url,
                )
            )
        return cls(providers)

    def provider(self, name: str) -> OAuthProvider:
        """Look up a provider.

        Raises:
            UnknownProviderException: If no client is configured for the name

        """
        try:
            return self._providers[name]
        except KeyError:
            logger.warning(f"Unknown OAuth provider {name!r}, configured: {self.provider_names}")
            raise UnknownProviderException(name) from None

    @property
    def provider_names(self) -> list[str]:
        return sorted(self._providers)
