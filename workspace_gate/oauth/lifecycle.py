"""Credential lifecycle management.

Loads persisted tokens and validates them with a silent refresh, falls back
to the interactive PKCE flow when there is no usable session, and keeps the
tokens file in sync with every refresh for the rest of the process.
"""

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from ..utils.errors import TokenRefreshError
from .oauth_client import ClientIdentity, GoogleOAuthClient
from .oauth_flow import OAuthFlowHandler
from .oauth_tokens import CredentialRecord, TokenStorage

logger = logging.getLogger(__name__)

FlowFactory = Callable[[GoogleOAuthClient], OAuthFlowHandler]


class CredentialManager:
    """Produces an authenticated GoogleOAuthClient for one principal."""

    def __init__(
        self,
        credentials_path: Path,
        tokens_path: Path,
        scopes: list[str],
        flow_factory: FlowFactory = OAuthFlowHandler,
    ):
        """Initialize the manager.

        Args:
            credentials_path: OAuth client credentials file (installed app)
            tokens_path: Tokens file to read and keep updated
            scopes: OAuth scopes to request on interactive authorization
            flow_factory: Builds the interactive flow handler for a client
        """
        self.credentials_path = Path(credentials_path)
        self.storage = TokenStorage(tokens_path)
        self.scopes = list(scopes)
        self.flow_factory = flow_factory
        self._record: CredentialRecord | None = None

    async def obtain_client(self) -> GoogleOAuthClient:
        """Return a client holding a valid session.

        Raises:
            CredentialsUnreadableError: If the credentials file cannot be used
            TokenRefreshError: If validating stored tokens fails for a reason
                other than an invalid session (e.g. network failure)
            AuthenticationError: If interactive authorization fails
        """
        identity = ClientIdentity.from_file(self.credentials_path)
        client = GoogleOAuthClient(identity, on_refresh=self._persist_refresh)

        record = self.storage.load()
        if record is not None:
            self._record = record
            client.set_credentials(record)
            try:
                await client.get_access_token()
                logger.info("Using stored OAuth session")
                return client
            except TokenRefreshError as e:
                if not e.is_session_invalid:
                    raise
                logger.info(f"Stored session is no longer valid ({e}); re-authorizing")

        flow = self.flow_factory(client)
        record = await flow.authorize(self.scopes)
        self._record = record
        self.storage.save(record)
        client.set_credentials(record)
        logger.info(f"Authorization complete. Tokens saved to {self.storage.token_path}")
        return client

    def _persist_refresh(self, update: dict[str, Any]) -> None:
        """Merge a refresh update onto the last known record and rewrite the file."""
        base = self._record or CredentialRecord()
        self._record = base.merged(update)
        try:
            self.storage.save(self._record)
        except OSError as e:
            logger.error(f"Failed to persist refreshed tokens to {self.storage.token_path}: {e}")


class ClientProvider:
    """Builds the authenticated client once and hands it out afterwards.

    Concurrent first calls share one initialization.
    """

    def __init__(self, manager: CredentialManager):
        self.manager = manager
        self._client: GoogleOAuthClient | None = None
        self._lock = asyncio.Lock()

    @property
    def initialized(self) -> bool:
        return self._client is not None

    async def get(self) -> GoogleOAuthClient:
        if self._client is not None:
            return self._client
        async with self._lock:
            if self._client is None:
                self._client = await self.manager.obtain_client()
        return self._client
