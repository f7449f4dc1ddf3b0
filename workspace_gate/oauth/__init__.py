"""OAuth 2.0 credential lifecycle for Google APIs.

This package provides:
- Authorization Code Flow with PKCE and a one-shot local callback server
- Silent token refresh with merge-and-persist of the refreshed record
- File-based token storage with owner-only permissions
"""

from .lifecycle import ClientProvider, CredentialManager
from .oauth_client import (
    OAUTH_PORT,
    REDIRECT_URI,
    ClientIdentity,
    GoogleOAuthClient,
)
from .oauth_flow import OAuthFlowHandler, generate_pkce_pair
from .oauth_tokens import CredentialRecord, TokenStorage

__all__ = [
    # Lifecycle
    "CredentialManager",
    "ClientProvider",
    # Client
    "ClientIdentity",
    "GoogleOAuthClient",
    "OAUTH_PORT",
    "REDIRECT_URI",
    # Authorization Code Flow
    "OAuthFlowHandler",
    "generate_pkce_pair",
    # Tokens
    "CredentialRecord",
    "TokenStorage",
]
