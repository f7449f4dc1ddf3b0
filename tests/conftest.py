"""Pytest configuration and fixtures for workspace-gate tests."""

import json
import tempfile
import time
from pathlib import Path

import pytest

from workspace_gate.oauth.oauth_client import ClientIdentity, GoogleOAuthClient
from workspace_gate.oauth.oauth_tokens import CredentialRecord, TokenStorage


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def credentials_file(temp_dir: Path) -> Path:
    """Write an installed-app credentials file."""
    path = temp_dir / "credentials.json"
    path.write_text(
        json.dumps(
            {
                "installed": {
                    "client_id": "test-client-id.apps.googleusercontent.com",
                    "client_secret": "test-client-secret",  # pragma: allowlist secret
                    "redirect_uris": ["http://localhost:3000/callback"],
                }
            }
        )
    )
    return path


@pytest.fixture
def identity() -> ClientIdentity:
    return ClientIdentity(
        client_id="test-client-id.apps.googleusercontent.com",
        client_secret="test-client-secret",  # pragma: allowlist secret
        redirect_uris=["http://localhost:3000/callback"],
    )


@pytest.fixture
def oauth_client(identity: ClientIdentity) -> GoogleOAuthClient:
    return GoogleOAuthClient(identity)


@pytest.fixture
def sample_record() -> CredentialRecord:
    """A record whose access token is valid for another hour."""
    return CredentialRecord(
        access_token="test_access_token_12345",
        refresh_token="test_refresh_token_67890",
        scope="https://www.googleapis.com/auth/calendar",
        token_type="Bearer",
        expiry_date=int((time.time() + 3600) * 1000),
    )


@pytest.fixture
def expired_record() -> CredentialRecord:
    """A record whose access token expired an hour ago."""
    return CredentialRecord(
        access_token="expired_access_token",
        refresh_token="stored_refresh_token",
        scope="https://www.googleapis.com/auth/calendar",
        token_type="Bearer",
        expiry_date=int((time.time() - 3600) * 1000),
    )


@pytest.fixture
def token_storage(temp_dir: Path) -> TokenStorage:
    return TokenStorage(temp_dir / "nested" / "tokens.json")


@pytest.fixture
def policy_file(temp_dir: Path):
    """Factory writing a policy file with the given content."""

    def _write(content: dict) -> Path:
        path = temp_dir / "policy.json"
        path.write_text(json.dumps(content))
        return path

    return _write
