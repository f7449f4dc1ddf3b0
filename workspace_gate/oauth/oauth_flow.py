"""OAuth authorization flow with PKCE.

This module implements the interactive OAuth 2.0 authorization code flow
with PKCE against Google, using a one-shot local callback server.
"""

import asyncio
import hashlib
import html
import logging
import secrets
import webbrowser
from base64 import urlsafe_b64encode
from collections.abc import Callable

from aiohttp import web

from ..utils.errors import (
    AuthorizationDeniedError,
    CallbackServerError,
    TokenExchangeFailedError,
)
from .oauth_client import OAUTH_PORT, GoogleOAuthClient
from .oauth_tokens import CredentialRecord

logger = logging.getLogger(__name__)

SUCCESS_PAGE = """
<html>
<head><title>Authorization Successful</title></head>
<body style="font-family: sans-serif; text-align: center; padding: 50px;">
    <h1 style="color: green;">Authorization Successful!</h1>
    <p>You can close this tab and return to the terminal.</p>
</body>
</html>
"""

FAILURE_PAGE = """
<html>
<head><title>Authorization Failed</title></head>
<body style="font-family: sans-serif; text-align: center; padding: 50px;">
    <h1 style="color: red;">Authorization Failed</h1>
    <p>{message}</p>
    <p>Please close this tab and run the authorization again.</p>
</body>
</html>
"""


def generate_pkce_pair() -> tuple[str, str]:
    """Generate PKCE code verifier and challenge.

    Returns:
        Tuple of (code_verifier, code_challenge)
    """
    # Generate code verifier (43-128 characters)
    code_verifier = (
        urlsafe_b64encode(secrets.token_bytes(32)).decode("utf-8").rstrip("=")
    )

    # Generate code challenge (SHA256 hash of verifier)
    code_challenge = (
        urlsafe_b64encode(hashlib.sha256(code_verifier.encode("utf-8")).digest())
        .decode("utf-8")
        .rstrip("=")
    )

    return code_verifier, code_challenge


class OAuthFlowHandler:
    """Handles the Google authorization code flow with PKCE."""

    def __init__(
        self,
        client: GoogleOAuthClient,
        redirect_port: int = OAUTH_PORT,
        host: str = "localhost",
        open_browser: Callable[[str], bool] = webbrowser.open,
    ):
        """Initialize OAuth flow handler.

        Args:
            client: OAuth client used to build the consent URL and exchange the code
            redirect_port: Port for local callback server; must match the registered redirect URI
            host: Loopback host the callback server binds to
            open_browser: Opens a URL in the system browser
        """
        self.client = client
        self.redirect_port = redirect_port
        self.host = host
        self._open_browser = open_browser

    async def authorize(self, scopes: list[str]) -> CredentialRecord:
        """Run the authorization code flow to obtain tokens.

        This will:
        1. Generate a fresh PKCE pair
        2. Start the one-shot callback server
        3. Open the browser for user consent
        4. Exchange the received code for tokens

        There is no timeout: the call waits until the browser redirects back.

        Returns:
            CredentialRecord from the token exchange

        Raises:
            CallbackServerError: If the callback server cannot listen
            AuthorizationDeniedError: If the callback carries no code
            TokenExchangeFailedError: If the code exchange fails
        """
        code_verifier, code_challenge = generate_pkce_pair()
        auth_url = self.client.generate_auth_url(scopes, code_challenge)

        loop = asyncio.get_running_loop()
        outcome: asyncio.Future[CredentialRecord] = loop.create_future()
        claimed = False

        async def callback(request: web.Request) -> web.Response:
            nonlocal claimed
            # Claimed before the first await so overlapping requests cannot settle the flow
            if claimed:
                return web.Response(text="Authorization already handled", status=410)
            claimed = True

            code = request.query.get("code")
            if not code:
                error = AuthorizationDeniedError(
                    request.query.get("error"), request.query.get("error_description")
                )
                outcome.set_exception(error)
                return web.Response(
                    text=FAILURE_PAGE.format(message=html.escape(str(error))),
                    content_type="text/html",
                    status=400,
                )

            try:
                record = await self.client.exchange_code(code, code_verifier)
            except TokenExchangeFailedError as e:
                if not outcome.done():
                    outcome.set_exception(e)
                return web.Response(
                    text=FAILURE_PAGE.format(message="Token exchange failed."),
                    content_type="text/html",
                    status=500,
                )

            if not outcome.done():
                outcome.set_result(record)
            return web.Response(text=SUCCESS_PAGE, content_type="text/html")

        app = web.Application()
        app.router.add_get("/callback", callback)

        runner = web.AppRunner(app)
        await runner.setup()
        site = web.TCPSite(runner, self.host, self.redirect_port)
        try:
            await site.start()
        except OSError as e:
            await runner.cleanup()
            raise CallbackServerError(self.host, self.redirect_port, str(e)) from e

        try:
            logger.info(
                f"Callback server listening on http://{self.host}:{self.redirect_port}/callback"
            )
            logger.info("Authorization required. Opening browser...")
            logger.info(f"If the browser does not open, visit: {auth_url}")
            browser_task = asyncio.create_task(self._launch_browser(auth_url))

            try:
                record = await outcome
            finally:
                if not browser_task.done():
                    browser_task.cancel()

            logger.info("Successfully obtained tokens")
            return record
        finally:
            await runner.cleanup()
            logger.debug("Callback server stopped")

    async def _launch_browser(self, auth_url: str) -> None:
        """Open the consent URL; failure only means the user opens it by hand."""
        try:
            opened = await asyncio.to_thread(self._open_browser, auth_url)
        except Exception as e:
            logger.warning(f"Failed to open browser ({e}). Open this URL manually:\n{auth_url}")
            return

        if not opened:
            logger.warning(f"Could not open a browser. Open this URL manually:\n{auth_url}")
