"""Google OAuth 2.0 client.

This module holds the application identity and the in-memory token record,
and talks to Google's token endpoint for code exchange and silent refresh.
"""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import urlencode

import httpx

from ..utils.errors import (
    CredentialsUnreadableError,
    InitializationError,
    TokenExchangeFailedError,
    TokenRefreshError,
)
from .oauth_tokens import CredentialRecord, token_update_from_response

logger = logging.getLogger(__name__)

AUTHORIZATION_ENDPOINT = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_ENDPOINT = "https://oauth2.googleapis.com/token"

OAUTH_PORT = 3000
REDIRECT_URI = f"http://localhost:{OAUTH_PORT}/callback"

RefreshCallback = Callable[[dict[str, Any]], None]


@dataclass
class ClientIdentity:
    """OAuth application identity from an installed-app credentials file."""

    client_id: str
    client_secret: str
    redirect_uris: list[str] = field(default_factory=list)

    @classmethod
    def from_file(cls, credentials_path: Path) -> "ClientIdentity":
        """Load the ``installed`` section of a Google credentials file.

        Args:
            credentials_path: Path to credentials.json

        Returns:
            ClientIdentity for the application

        Raises:
            CredentialsUnreadableError: If the file is missing or malformed
        """
        try:
            with open(credentials_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise CredentialsUnreadableError(credentials_path, "file not found") from None
        except (OSError, json.JSONDecodeError) as e:
            raise CredentialsUnreadableError(credentials_path, str(e)) from e

        installed = data.get("installed") if isinstance(data, dict) else None
        if not isinstance(installed, dict):
            raise CredentialsUnreadableError(
                credentials_path,
                "missing 'installed' section",
                hint="Create the OAuth client as type 'Desktop app' and download its JSON.",
            )

        try:
            return cls(
                client_id=installed["client_id"],
                client_secret=installed["client_secret"],
                redirect_uris=list(installed.get("redirect_uris", [])),
            )
        except KeyError as e:
            raise CredentialsUnreadableError(
                credentials_path, f"'installed' section missing {e.args[0]!r}"
            ) from e


class GoogleOAuthClient:
    """Authenticated client handle for Google APIs.

    The ``on_refresh`` callback is registered once at construction and is
    called with the partial token update every time the access token is
    silently refreshed, before control returns to the caller that triggered
    the refresh.
    """

    def __init__(
        self,
        identity: ClientIdentity,
        redirect_uri: str = REDIRECT_URI,
        on_refresh: RefreshCallback | None = None,
    ):
        """Initialize the client.

        Args:
            identity: Application identity (client id/secret)
            redirect_uri: Redirect URI registered for the application
            on_refresh: Called with refreshed token fields after each silent refresh
        """
        self.identity = identity
        self.redirect_uri = redirect_uri
        self.on_refresh = on_refresh
        self.credentials: CredentialRecord | None = None

    def set_credentials(self, record: CredentialRecord) -> None:
        """Replace the in-memory token record."""
        self.credentials = record

    def generate_auth_url(self, scopes: list[str], code_challenge: str) -> str:
        """Build the consent URL for an offline-access PKCE authorization.

        Args:
            scopes: OAuth scopes to request
            code_challenge: S256 PKCE challenge

        Returns:
            Authorization URL to open in a browser
        """
        params = {
            "access_type": "offline",
            "response_type": "code",
            "client_id": self.identity.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": " ".join(scopes),
            "code_challenge": code_challenge,
            "code_challenge_method": "S256",
        }
        return f"{AUTHORIZATION_ENDPOINT}?{urlencode(params)}"

    async def exchange_code(self, code: str, code_verifier: str) -> CredentialRecord:
        """Exchange an authorization code for tokens.

        Args:
            code: Authorization code from the callback
            code_verifier: PKCE verifier matching the challenge sent earlier

        Returns:
            CredentialRecord from the token response

        Raises:
            TokenExchangeFailedError: If the exchange fails
        """
        token_data = {
            "grant_type": "authorization_code",
            "code": code,
            "code_verifier": code_verifier,
            "client_id": self.identity.client_id,
            "client_secret": self.identity.client_secret,
            "redirect_uri": self.redirect_uri,
        }

        async with httpx.AsyncClient() as client:
            try:
                response = await client.post(
                    TOKEN_ENDPOINT,
                    data=token_data,
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
                response.raise_for_status()
                token_response = response.json()
            except httpx.HTTPStatusError as e:
                detail = _parse_oauth_error(e.response) or str(e)
                raise TokenExchangeFailedError(
                    f"Failed to exchange code for token: {detail}"
                ) from e
            except (httpx.HTTPError, ValueError) as e:
                raise TokenExchangeFailedError(f"Failed to exchange code for token: {e}") from e

        if not isinstance(token_response, dict) or "access_token" not in token_response:
            raise TokenExchangeFailedError("Token response did not include an access_token")

        return CredentialRecord.from_oauth_response(token_response)

    async def refresh_access_token(self) -> CredentialRecord:
        """Silently refresh the access token using the stored refresh token.

        Returns:
            The merged in-memory record

        Raises:
            TokenRefreshError: If the refresh fails; ``status_code`` carries the
                provider's HTTP status when there was one
        """
        if self.credentials is None or not self.credentials.refresh_token:
            raise TokenRefreshError("No refresh token is available", status_code=401)

        refresh_data = {
            "grant_type": "refresh_token",
            "refresh_token": self.credentials.refresh_token,
            "client_id": self.identity.client_id,
            "client_secret": self.identity.client_secret,
        }

        async with httpx.AsyncClient() as client:
            try:
                response = await client.post(
                    TOKEN_ENDPOINT,
                    data=refresh_data,
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
                response.raise_for_status()
                token_response = response.json()
            except httpx.HTTPStatusError as e:
                detail = _parse_oauth_error(e.response) or str(e)
                raise TokenRefreshError(
                    f"Failed to refresh token: {detail}",
                    status_code=e.response.status_code,
                ) from e
            except (httpx.HTTPError, ValueError) as e:
                raise TokenRefreshError(f"Failed to refresh token: {e}") from e

        if not isinstance(token_response, dict) or not token_response.get("access_token"):
            raise TokenRefreshError("Token response did not include an access_token")

        update = token_update_from_response(token_response)
        self.credentials = self.credentials.merged(update)
        logger.debug("Access token refreshed")

        if self.on_refresh is not None:
            self.on_refresh(update)
        return self.credentials

    async def get_access_token(self) -> str:
        """Return a usable access token, refreshing it first if needed.

        Raises:
            InitializationError: If no credentials have been set
            TokenRefreshError: If a needed refresh fails
        """
        if self.credentials is None:
            raise InitializationError("OAuth credentials", "Authorize the client first")

        if self.credentials.is_expired():
            await self.refresh_access_token()

        if not self.credentials.access_token:
            raise TokenRefreshError("No access token is available after refresh")
        return self.credentials.access_token

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send an authorized request to a Google API.

        Args:
            method: HTTP method
            url: Absolute API URL
            **kwargs: Passed through to httpx (params, json, ...)

        Returns:
            The successful response

        Raises:
            httpx.HTTPStatusError: On a non-2xx response
        """
        access_token = await self.get_access_token()
        headers = dict(kwargs.pop("headers", None) or {})
        headers["Authorization"] = f"Bearer {access_token}"

        async with httpx.AsyncClient() as client:
            response = await client.request(method, url, headers=headers, **kwargs)
            response.raise_for_status()
            return response


def _parse_oauth_error(response: httpx.Response) -> str | None:
    """Parse an OAuth error response (RFC 6749 Section 5.2).

    Returns:
        "error: description" string, or None if the body is not an OAuth error
    """
    try:
        error_data = response.json()
    except ValueError:
        return None
    if not isinstance(error_data, dict):
        return None

    error_code = error_data.get("error", "unknown_error")
    error_description = error_data.get("error_description", "")
    if error_description:
        return f"{error_code}: {error_description}"
    return error_code
