"""Policy file loading.

The policy file is an optional JSON object keyed by resource domain
(``calendar``, ``docs``, ``sheets``). Every failure mode degrades to "no
section"; callers decide what that means for their domain.
"""

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def load_config(config_path: Path | None, key: str) -> dict[str, Any] | None:
    """Load one domain's section from the policy file.

    Args:
        config_path: Policy file path, or None when not configured
        key: Domain name to extract

    Returns:
        The section as a dict, or None if the file or section is unavailable
    """
    if config_path is None:
        return None

    config_path = Path(config_path)
    if not config_path.exists():
        logger.warning(f"Policy config file not found: {config_path}")
        return None

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            parsed = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to read policy config file {config_path}: {e}")
        return None

    if not isinstance(parsed, dict):
        logger.error(f"Policy config file {config_path} is not a JSON object")
        return None

    section = parsed.get(key)
    if section is None:
        logger.debug(f"No '{key}' section in {config_path}")
        return None

    if not isinstance(section, dict):
        logger.error(f"'{key}' section in {config_path} is not a JSON object; ignoring it")
        return None

    return section
