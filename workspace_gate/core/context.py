"""Per-domain runtime wiring.

Each resource domain process assembles one DomainContext at startup: its
scopes, its token file, its policy (loaded once, never reloaded) and the
provider of the lazily authenticated client.
"""

import logging
from dataclasses import dataclass
from typing import TypeAlias

from ..oauth.lifecycle import ClientProvider, CredentialManager
from ..permissions import calendar, docs, sheets
from .config import Settings

logger = logging.getLogger(__name__)

DOMAIN_SCOPES: dict[str, list[str]] = {
    "calendar": ["https://www.googleapis.com/auth/calendar"],
    "docs": ["https://www.googleapis.com/auth/drive.readonly"],
    "sheets": ["https://www.googleapis.com/auth/spreadsheets"],
    "gmail": ["https://www.googleapis.com/auth/gmail.modify"],
}

DomainPolicy: TypeAlias = (
    calendar.PermissionConfig | docs.PermissionConfig | sheets.PermissionConfig | None
)

POLICY_LOADERS = {
    "calendar": calendar.load_permission_config,
    "docs": docs.load_permission_config,
    "sheets": sheets.load_permission_config,
}


@dataclass(frozen=True)
class DomainContext:
    """Everything a resource domain's handlers need."""

    domain: str
    settings: Settings
    scopes: list[str]
    policy: DomainPolicy
    provider: ClientProvider


def load_policy(settings: Settings, domain: str) -> DomainPolicy:
    """Load a domain's policy; domains without a policy get None."""
    loader = POLICY_LOADERS.get(domain)
    if loader is None:
        return None
    return loader(settings.google_mcp_config)


def build_domain_context(settings: Settings, domain: str) -> DomainContext:
    """Assemble the context for ``domain``.

    The credentials path is checked here so a misconfigured process fails at
    startup rather than on its first tool call.

    Raises:
        ValueError: If the domain is unknown
        CredentialsUnreadableError: If the credentials file is unset or missing
    """
    if domain not in DOMAIN_SCOPES:
        raise ValueError(f"Unknown domain: {domain}")

    scopes = DOMAIN_SCOPES[domain]
    manager = CredentialManager(
        credentials_path=settings.require_credentials_path(),
        tokens_path=settings.tokens_path_for(domain),
        scopes=scopes,
    )
    logger.debug(f"Built {domain} context (tokens: {manager.storage.token_path})")
    return DomainContext(
        domain=domain,
        settings=settings,
        scopes=scopes,
        policy=load_policy(settings, domain),
        provider=ClientProvider(manager),
    )
