"""OAuth token record and file storage.

This module handles the single persisted token record for one principal:
loading it, merging refresh updates into it, and writing it back with
owner-only permissions.
"""

import json
import logging
import os
import tempfile
import time
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class CredentialRecord:
    """OAuth token set as persisted in the tokens file."""

    access_token: str | None = None
    refresh_token: str | None = None
    scope: str | None = None
    token_type: str | None = "Bearer"
    expiry_date: int | None = None  # Milliseconds since epoch
    id_token: str | None = None

    def is_expired(self, buffer_seconds: int = 60) -> bool:
        """Check if the access token is expired or will expire soon.

        Args:
            buffer_seconds: Consider token expired if it expires within this many seconds

        Returns:
            True if there is no usable access token
        """
        if not self.access_token:
            return True
        if self.expiry_date is None:
            # No expiration info, assume valid
            return False
        return time.time() * 1000 >= self.expiry_date - buffer_seconds * 1000

    def merged(self, update: dict[str, Any]) -> "CredentialRecord":
        """Return a new record with ``update`` laid over this one.

        Fields absent from ``update`` or set to None keep their current value,
        so a refresh response without ``refresh_token`` never erases it.
        """
        current = self.to_dict()
        for key, value in update.items():
            if value is not None:
                current[key] = value
        return CredentialRecord.from_dict(current)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for storage, dropping unset fields."""
        return {key: value for key, value in asdict(self).items() if value is not None}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CredentialRecord":
        """Create from dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})

    @classmethod
    def from_oauth_response(cls, response_data: dict[str, Any]) -> "CredentialRecord":
        """Create from a token endpoint response.

        Args:
            response_data: JSON response from the token endpoint

        Returns:
            CredentialRecord with expiry_date computed from expires_in
        """
        return cls.from_dict(token_update_from_response(response_data))


def token_update_from_response(response_data: dict[str, Any]) -> dict[str, Any]:
    """Translate a token endpoint response into record fields.

    Only fields present in the response are returned, so the result can be
    merged onto an existing record.
    """
    update: dict[str, Any] = {
        key: response_data[key]
        for key in ("access_token", "refresh_token", "scope", "token_type", "id_token")
        if response_data.get(key) is not None
    }
    expires_in = response_data.get("expires_in")
    if expires_in is not None:
        update["expiry_date"] = int((time.time() + int(expires_in)) * 1000)
    return update


class TokenStorage:
    """File-based storage for a single CredentialRecord.

    The file holds the record as its sole JSON content. Writes go to a
    temporary file in the same directory which is then renamed over the
    target, so a crash mid-write leaves the previous (stale) record intact.
    """

    def __init__(self, token_path: Path):
        """Initialize token storage.

        Args:
            token_path: Path of the tokens file (parent directories are created on save)
        """
        self.token_path = Path(token_path)

    def load(self) -> CredentialRecord | None:
        """Load the persisted record.

        Returns:
            CredentialRecord if present and parseable, None otherwise
        """
        if not self.token_path.exists():
            logger.debug(f"No saved tokens at {self.token_path}")
            return None

        try:
            with open(self.token_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable tokens file {self.token_path}: {e}")
            return None

        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed tokens file {self.token_path}")
            return None

        logger.debug(f"Loaded tokens from {self.token_path}")
        return CredentialRecord.from_dict(data)

    def save(self, record: CredentialRecord) -> None:
        """Write the full record with owner-only permissions.

        Args:
            record: Record to persist

        Raises:
            OSError: If the directory or file cannot be written
        """
        self.token_path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(record.to_dict(), indent=2)

        # mkstemp creates the file with mode 0o600
        fd, tmp_name = tempfile.mkstemp(
            dir=self.token_path.parent, prefix=f".{self.token_path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, self.token_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.debug(f"Saved tokens to {self.token_path}")
