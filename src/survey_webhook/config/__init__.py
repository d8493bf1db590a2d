"""Configuration module for Survey Webhook.

This module provides centralized configuration management with consistent
environment variable naming across all commands.

Usage:
    from survey_webhook.config import Config
    from survey_webhook.config.base import EnvVars, get_config_value

Environment Variable Naming Convention:
    - All settings use the SURVEY_WEBHOOK_* prefix
    - RemoteControl credentials also accept the legacy LIMESURVEY_* names
"""

from .base import (
    ENV_PREFIX,
    EnvVars,
    get_bool_config_value,
    get_config_value,
    get_env_value,
)
from .server import HOST_BACKENDS, Config

__all__ = [
    # Config classes
    "Config",
    "HOST_BACKENDS",
    # Environment variable utilities
    "EnvVars",
    "get_config_value",
    "get_env_value",
    "get_bool_config_value",
    # Constants
    "ENV_PREFIX",
]
