"""Utility modules for workspace-gate."""

from .errors import AuthenticationError, ConfigurationError, WorkspaceGateError
from .fanout import gather_settled

__all__ = ["AuthenticationError", "ConfigurationError", "WorkspaceGateError", "gather_settled"]
