"""Error types for workspace-gate."""


class WorkspaceGateError(Exception):
    """Base exception for workspace-gate errors."""

    pass


# Configuration errors
class ConfigurationError(WorkspaceGateError):
    """Raised when configuration is missing or invalid."""

    pass


class CredentialsUnreadableError(ConfigurationError):
    """Raised when the OAuth client credentials file cannot be used.

    This is fatal: nothing can be authorized without an application identity.
    """

    def __init__(self, path: object, reason: str, hint: str | None = None):
        message = f"OAuth credentials unreadable ({path}): {reason}"
        super().__init__(message)
        self.path = path
        self.reason = reason
        self.hint = hint or (
            "Download an OAuth client (Desktop app) JSON from the Google Cloud "
            "Console and point GOOGLE_OAUTH_CREDENTIALS at it."
        )


# Authentication errors
class AuthenticationError(WorkspaceGateError):
    """Raised when authentication is required or fails."""

    pass


class AuthorizationDeniedError(AuthenticationError):
    """Raised when the browser callback arrives without an authorization code."""

    def __init__(self, error: str | None = None, description: str | None = None):
        detail = error or "no authorization code received"
        if description:
            detail = f"{detail}: {description}"
        super().__init__(f"Authorization denied ({detail}). Run the authorization again.")
        self.error = error
        self.description = description


class TokenExchangeFailedError(AuthenticationError):
    """Raised when the authorization code cannot be exchanged for tokens."""

    pass


class TokenRefreshError(AuthenticationError):
    """Raised when a silent refresh of the access token fails."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_session_invalid(self) -> bool:
        """True when the provider rejected the stored session (expired or revoked)."""
        return self.status_code in (400, 401)


class CallbackServerError(AuthenticationError):
    """Raised when the local OAuth callback listener cannot serve."""

    def __init__(self, host: str, port: int, reason: str):
        super().__init__(f"Callback server on {host}:{port} failed: {reason}")
        self.host = host
        self.port = port


class InitializationError(WorkspaceGateError):
    """Raised when a component is not properly initialized."""

    def __init__(self, component: str, action: str = "Call initialize() first"):
        super().__init__(f"{component} not initialized. {action}")
        self.component = component
