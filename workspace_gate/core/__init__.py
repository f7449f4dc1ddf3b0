"""Core configuration and wiring."""

from .config import Settings, resolve_path
from .context import DomainContext, build_domain_context

__all__ = ["DomainContext", "Settings", "build_domain_context", "resolve_path"]
