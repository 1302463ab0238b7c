"""Configuration Loader - JSON file plus environment variable overrides.

Usage:
    from server_notification.config_loader import load_config

    config = load_config(Path("/etc/server-notification/config.json"))

Environment Variable Overrides:
- SERVER_NOTIFICATION_WEBHOOK_URL -> config.webhook_url
- SERVER_NOTIFICATION_TIMEOUT -> config.timeout
- SERVER_NOTIFICATION_VERIFY_SSL -> config.verify_ssl
"""

from __future__ import annotations

import json
import os
from pathlib import Path

from server_notification.config import NotificationConfig

# Environment variable mappings
# Format: (env_var_name, config_field)
ENV_VAR_MAPPINGS: list[tuple[str, str]] = [
    ("SERVER_NOTIFICATION_WEBHOOK_URL", "webhook_url"),
    ("SERVER_NOTIFICATION_TIMEOUT", "timeout"),
    ("SERVER_NOTIFICATION_VERIFY_SSL", "verify_ssl"),
]


def load_config_from_file(config_path: Path) -> NotificationConfig:
    """Load configuration from a JSON file.

    Args:
        config_path: Path to the config.json file.

    Returns:
        NotificationConfig object.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        json.JSONDecodeError: If the file is not valid JSON.
        ValidationError: If the JSON doesn't match the schema.
    """
    with open(config_path, encoding="utf-8") as f:
        data = json.load(f)

    return NotificationConfig.model_validate(data)


def apply_env_overrides(config: NotificationConfig) -> NotificationConfig:
    """Apply environment variable overrides to configuration.

    Only non-empty environment variables are applied. Pydantic coerces the
    string values ("10", "false") to the field types.

    Args:
        config: Base configuration object.

    Returns:
        New configuration object with env var overrides applied.
    """
    config_dict = config.model_dump()

    for env_var, field_name in ENV_VAR_MAPPINGS:
        env_value = os.environ.get(env_var)
        if env_value:
            config_dict[field_name] = env_value

    return NotificationConfig.model_validate(config_dict)


def load_config(config_path: Path | None = None) -> NotificationConfig:
    """Load configuration with env var overrides applied.

    Args:
        config_path: Optional JSON file. Defaults are used if it is None or
            does not exist.

    Returns:
        The effective configuration.
    """
    if config_path is not None and config_path.exists():
        config = load_config_from_file(config_path)
    else:
        config = NotificationConfig()

    return apply_env_overrides(config)


def get_env_overrides() -> dict[str, str]:
    """Get all environment variable overrides that are currently set."""
    overrides = {}
    for env_var, _field in ENV_VAR_MAPPINGS:
        value = os.environ.get(env_var)
        if value:
            overrides[env_var] = value
    return overrides
