"""Google Sheets allowlist permissions."""

import logging
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .config_loader import load_config
from .decision import AccessDecision

logger = logging.getLogger(__name__)


class SpreadsheetAccess(str, Enum):
    READONLY = "readonly"
    READWRITE = "readwrite"


class SpreadsheetEntry(BaseModel):
    """An allowlisted spreadsheet and how it may be used."""

    id: str
    name: str = ""
    access: SpreadsheetAccess = SpreadsheetAccess.READONLY


class PermissionConfig(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    allowed_spreadsheets: list[SpreadsheetEntry] = Field(
        default_factory=list, alias="allowedSpreadsheets"
    )

    def find(self, spreadsheet_id: str) -> SpreadsheetEntry | None:
        return next((e for e in self.allowed_spreadsheets if e.id == spreadsheet_id), None)


def load_permission_config(config_path: Path | None) -> PermissionConfig | None:
    """Load the sheets allowlist; None means unrestricted."""
    section = load_config(config_path, "sheets")
    if section is None:
        return None
    try:
        return PermissionConfig.model_validate(section)
    except ValidationError as e:
        logger.error(f"Invalid 'sheets' policy section ({e}); sheets access is unrestricted")
        return None


def check_access(
    config: PermissionConfig | None,
    spreadsheet_id: str,
    require_write: bool = False,
) -> AccessDecision:
    """Check whether a spreadsheet may be read, or written when ``require_write``."""
    # No allowlist configured: everything is accessible
    if config is None:
        return AccessDecision.allow()

    entry = config.find(spreadsheet_id)
    if entry is None:
        return AccessDecision.deny(
            f"Spreadsheet ({spreadsheet_id}) is not in the allowlist. "
            "Add it to allowedSpreadsheets."
        )

    if require_write and entry.access is SpreadsheetAccess.READONLY:
        return AccessDecision.deny(f'Spreadsheet "{entry.name or entry.id}" is read-only.')

    return AccessDecision.allow()
