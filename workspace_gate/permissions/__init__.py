"""Resource access control for agent operations.

This package decides whether an operation the agent attempts is allowed:

- calendar: classifies an event's attendees into a relationship tier
  (self_only / internal / external) and resolves the per-operation action table
- docs: document and folder allowlists, with nested folders resolved through
  FolderHierarchy
- sheets: spreadsheet allowlist with readonly/readwrite access

Example usage:
    policy = calendar.load_permission_config(settings.google_mcp_config)
    result = calendar.check_permission(policy, "delete", attendees, self_email)
    if not result.allowed:
        return calendar.deny_message("delete", result.condition)

Security model:
- Denials are normal results (PermissionCheckResult / AccessDecision), not exceptions
- Calendar falls back to a restrictive default policy when unconfigured
- Docs and sheets are unrestricted when unconfigured (policy is None)
"""

from . import calendar, docs, sheets
from .config_loader import load_config
from .decision import AccessDecision
from .hierarchy import FolderHierarchy

__all__ = [
    "AccessDecision",
    "FolderHierarchy",
    "calendar",
    "docs",
    "load_config",
    "sheets",
]
