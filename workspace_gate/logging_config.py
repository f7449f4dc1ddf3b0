"""Centralized logging configuration.

Logs go to stderr so stdout stays free for tool protocol traffic.
"""

import logging
import sys
from pathlib import Path


def setup_logging(
    name: str = "workspace_gate",
    level: str = "INFO",
    log_file: Path | None = None,
) -> logging.Logger:
    """Configure logging with consistent format.

    Args:
        name: Logger name to return
        level: Log level name
        log_file: Optional file path for logging output

    Returns:
        Configured logger instance
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,  # Override any existing configuration
    )

    return logging.getLogger(name)
