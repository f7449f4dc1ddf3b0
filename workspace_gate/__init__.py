"""Workspace Gate - credential lifecycle and access control for agents using Google Workspace."""

__version__ = "0.1.0"

from .core.config import Settings
from .core.context import DomainContext, build_domain_context
from .oauth import (
    ClientIdentity,
    ClientProvider,
    CredentialManager,
    CredentialRecord,
    GoogleOAuthClient,
    OAuthFlowHandler,
    TokenStorage,
)
from .permissions import AccessDecision, FolderHierarchy
from .utils.errors import (
    AuthenticationError,
    AuthorizationDeniedError,
    CallbackServerError,
    ConfigurationError,
    CredentialsUnreadableError,
    TokenExchangeFailedError,
    TokenRefreshError,
    WorkspaceGateError,
)
from .utils.fanout import gather_settled

__all__ = [
    "Settings",
    "DomainContext",
    "build_domain_context",
    # OAuth
    "ClientIdentity",
    "ClientProvider",
    "CredentialManager",
    "CredentialRecord",
    "GoogleOAuthClient",
    "OAuthFlowHandler",
    "TokenStorage",
    # Permissions
    "AccessDecision",
    "FolderHierarchy",
    # Errors
    "WorkspaceGateError",
    "ConfigurationError",
    "CredentialsUnreadableError",
    "AuthenticationError",
    "AuthorizationDeniedError",
    "TokenExchangeFailedError",
    "TokenRefreshError",
    "CallbackServerError",
    # Fan-out
    "gather_settled",
]
