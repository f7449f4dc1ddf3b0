"""Calendar event permissions.

Each operation on an event is classified by who else it touches (the
attendee condition) and resolved through a per-operation action table:

    read    self_only=allow  internal=allow  external=allow
    create  self_only=allow  internal=deny   external=deny
    update  self_only=allow  internal=deny   external=deny
    delete  self_only=deny   internal=deny   external=deny

The table above is the default when no policy file (or no ``calendar``
section) is configured. Configured tables are merged entry by entry onto
these defaults, so every operation yields a verdict for every condition.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .config_loader import load_config

logger = logging.getLogger(__name__)


class PermissionAction(str, Enum):
    """Verdict for an operation."""

    ALLOW = "allow"
    DENY = "deny"


class OperationType(str, Enum):
    """Kinds of calendar operations."""

    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class AttendeeCondition(str, Enum):
    """Relationship tier of an operation's other parties."""

    SELF_ONLY = "self_only"
    INTERNAL = "internal"
    EXTERNAL = "external"


class ConditionalPermission(BaseModel):
    """Action table for one operation, keyed by attendee condition."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    self_only: PermissionAction
    internal: PermissionAction
    external: PermissionAction

    def action_for(self, condition: AttendeeCondition) -> PermissionAction:
        return getattr(self, condition.value)


class PermissionConfig(BaseModel):
    """Calendar policy: internal domain plus one action table per operation."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    internal_domain: str = Field(default="", alias="internalDomain")
    permissions: dict[OperationType, ConditionalPermission]


DEFAULT_PERMISSIONS: dict[OperationType, ConditionalPermission] = {
    OperationType.READ: ConditionalPermission(
        self_only=PermissionAction.ALLOW,
        internal=PermissionAction.ALLOW,
        external=PermissionAction.ALLOW,
    ),
    OperationType.CREATE: ConditionalPermission(
        self_only=PermissionAction.ALLOW,
        internal=PermissionAction.DENY,
        external=PermissionAction.DENY,
    ),
    OperationType.UPDATE: ConditionalPermission(
        self_only=PermissionAction.ALLOW,
        internal=PermissionAction.DENY,
        external=PermissionAction.DENY,
    ),
    OperationType.DELETE: ConditionalPermission(
        self_only=PermissionAction.DENY,
        internal=PermissionAction.DENY,
        external=PermissionAction.DENY,
    ),
}


def default_permission_config() -> PermissionConfig:
    """Return the restrictive policy used when nothing is configured."""
    return PermissionConfig(internal_domain="", permissions=dict(DEFAULT_PERMISSIONS))


def parse_permission_config(section: Mapping[str, Any]) -> PermissionConfig:
    """Build a complete policy from a (possibly partial) ``calendar`` section.

    Invalid pieces are logged and replaced by their defaults.
    """
    internal_domain = section.get("internalDomain", "")
    if not isinstance(internal_domain, str):
        logger.warning("Calendar policy: internalDomain must be a string; ignoring it")
        internal_domain = ""

    raw_permissions = section.get("permissions") or {}
    if not isinstance(raw_permissions, Mapping):
        logger.warning("Calendar policy: permissions must be an object; using defaults")
        raw_permissions = {}

    tables: dict[OperationType, ConditionalPermission] = {}
    for operation in OperationType:
        default = DEFAULT_PERMISSIONS[operation]
        entry = raw_permissions.get(operation.value)
        if entry is None:
            tables[operation] = default
            continue
        if not isinstance(entry, Mapping):
            logger.warning(f"Calendar policy: '{operation.value}' must be an object; using default")
            tables[operation] = default
            continue
        try:
            tables[operation] = ConditionalPermission.model_validate(
                {**default.model_dump(mode="json"), **entry}
            )
        except ValidationError as e:
            logger.warning(f"Calendar policy: invalid '{operation.value}' table ({e}); using default")
            tables[operation] = default

    return PermissionConfig(internal_domain=internal_domain, permissions=tables)


def load_permission_config(config_path: Path | None) -> PermissionConfig:
    """Load the calendar policy, falling back to the restrictive default."""
    section = load_config(config_path, "calendar")
    if section is None:
        return default_permission_config()
    return parse_permission_config(section)


def classify_attendees(
    attendees: Iterable[str],
    self_email: str,
    internal_domain: str,
) -> AttendeeCondition:
    """Classify the other parties of an operation.

    Comparison is case-insensitive. ``internal`` is only possible when an
    internal domain is configured.

    Args:
        attendees: Email addresses involved in the operation
        self_email: The acting principal's address
        internal_domain: Organization domain (e.g. "example.com"), or ""

    Returns:
        The relationship tier
    """
    me = self_email.lower()
    others = [email.lower() for email in attendees if email.lower() != me]

    if not others:
        return AttendeeCondition.SELF_ONLY

    domain = internal_domain.lower().lstrip("@")
    if domain and all(email.endswith(f"@{domain}") for email in others):
        return AttendeeCondition.INTERNAL

    return AttendeeCondition.EXTERNAL


@dataclass(frozen=True)
class PermissionCheckResult:
    """Verdict plus the tier that produced it."""

    action: PermissionAction
    condition: AttendeeCondition

    @property
    def allowed(self) -> bool:
        return self.action is PermissionAction.ALLOW


def check_permission(
    config: PermissionConfig,
    operation: OperationType | str,
    attendees: Iterable[str],
    self_email: str,
) -> PermissionCheckResult:
    """Decide whether ``operation`` may touch an event with these attendees."""
    operation = OperationType(operation)
    condition = classify_attendees(attendees, self_email, config.internal_domain)
    table = config.permissions.get(operation, DEFAULT_PERMISSIONS[operation])
    return PermissionCheckResult(action=table.action_for(condition), condition=condition)


CONDITION_LABELS: dict[AttendeeCondition, str] = {
    AttendeeCondition.SELF_ONLY: "only yourself",
    AttendeeCondition.INTERNAL: "internal members",
    AttendeeCondition.EXTERNAL: "external attendees",
}

OPERATION_LABELS: dict[OperationType, str] = {
    OperationType.READ: "Reading",
    OperationType.CREATE: "Creating",
    OperationType.UPDATE: "Updating",
    OperationType.DELETE: "Deleting",
}


def deny_message(operation: OperationType | str, condition: AttendeeCondition) -> str:
    """Human-readable reason for a denied calendar operation."""
    operation = OperationType(operation)
    return (
        f"{OPERATION_LABELS[operation]} events involving {CONDITION_LABELS[condition]} "
        f"is not allowed (attendee tier: {condition.value})."
    )
