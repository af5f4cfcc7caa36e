"""
Environment configuration helpers.

Small readers over os.environ used by logging setup and node defaults.
"""
import os
from typing import List, Optional


def get_env(key: str, default: Optional[str] = None) -> Optional[str]:
    """Return a stripped environment value, or default when unset or blank."""
    value = os.environ.get(key)
    if value is None or not value.strip():
        return default
    return value.strip()


def get_env_list(key: str, default: str = '') -> List[str]:
    """
    Get environment variable as a comma-separated list.

    Args:
        key: Environment variable key
        default: Default value if key is not set

    Returns:
        List of non-empty, stripped strings
    """
    value = os.environ.get(key, default)
    return [item.strip() for item in value.split(',') if item.strip()]


def get_env_bool(key: str, default: bool = False) -> bool:
    """
    Get environment variable as boolean.

    'true', '1', 'yes' and 'on' (any case) are truthy; anything else is False.
    """
    value = os.environ.get(key, str(default)).lower()
    return value in ('true', '1', 'yes', 'on')
