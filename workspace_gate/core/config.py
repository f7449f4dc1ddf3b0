"""Configuration management for workspace-gate."""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..utils.errors import CredentialsUnreadableError


def resolve_path(value: str | Path) -> Path:
    """Expand a leading ``~`` to the home directory."""
    text = str(value)
    if text == "~":
        return Path.home()
    if text.startswith("~/"):
        return Path.home() / text[2:]
    return Path(text)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Built once by the entry point and passed to the components that need it.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # OAuth
    google_oauth_credentials: Path | None = Field(
        default=None,
        description="OAuth client credentials JSON (Desktop app) from the Google Cloud Console",
    )
    google_oauth_tokens: Path | None = Field(
        default=None,
        description="Token file. Defaults to ~/.config/google-<domain>-mcp/tokens.json",
    )

    # Policy
    google_mcp_config: Path | None = Field(
        default=None,
        description="Optional JSON policy file with calendar/docs/sheets sections",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: Path | None = Field(default=None, description="Optional log file")

    @field_validator("google_oauth_credentials", "google_oauth_tokens", "google_mcp_config", "log_file", mode="before")
    @classmethod
    def expand_home(cls, v: str | Path | None) -> Path | None:
        """Expand ``~`` in path settings; treat empty strings as unset."""
        if v is None or v == "":
            return None
        return resolve_path(v)

    def tokens_path_for(self, domain: str) -> Path:
        """Return the token file path for a resource domain.

        Args:
            domain: Resource domain name (e.g. "calendar")

        Returns:
            The configured token path, or the per-domain default
        """
        if self.google_oauth_tokens is not None:
            return self.google_oauth_tokens
        return Path.home() / ".config" / f"google-{domain}-mcp" / "tokens.json"

    def require_credentials_path(self) -> Path:
        """Return the credentials path, failing with a remediation hint if unusable.

        Raises:
            CredentialsUnreadableError: If unset or pointing at a missing file
        """
        if self.google_oauth_credentials is None:
            raise CredentialsUnreadableError(
                "<unset>",
                "GOOGLE_OAUTH_CREDENTIALS is not set",
                hint="Set GOOGLE_OAUTH_CREDENTIALS to the path of your credentials.json.",
            )
        if not self.google_oauth_credentials.exists():
            raise CredentialsUnreadableError(
                self.google_oauth_credentials,
                "file not found",
                hint="Check that GOOGLE_OAUTH_CREDENTIALS points at an existing credentials.json.",
            )
        return self.google_oauth_credentials
