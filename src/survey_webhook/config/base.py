"""Environment variable names and the CLI > environment > default lookup.

Every setting can be given as a CLI option or a ``SURVEY_WEBHOOK_*``
variable. The RemoteControl credentials also accept the ``LIMESURVEY_*``
names used by older deployments.
"""

import os
from typing import Any, Callable, Optional, TypeVar

T = TypeVar("T")

ENV_PREFIX = "SURVEY_WEBHOOK_"

TRUE_VALUES = frozenset({"true", "1", "yes", "on"})
FALSE_VALUES = frozenset({"false", "0", "no", "off", ""})


class EnvVars:
    """Names of the environment variables read by the server."""

    DB_PATH = f"{ENV_PREFIX}DB_PATH"

    API_HOST = f"{ENV_PREFIX}API_HOST"
    API_PORT = f"{ENV_PREFIX}API_PORT"
    API_TITLE = f"{ENV_PREFIX}API_TITLE"
    API_VERSION = f"{ENV_PREFIX}API_VERSION"
    API_BEARER_TOKEN = f"{ENV_PREFIX}API_BEARER_TOKEN"

    METRICS_ENABLED = f"{ENV_PREFIX}METRICS_ENABLED"

    LOG_LEVEL = f"{ENV_PREFIX}LOG_LEVEL"
    LOG_FORMAT = f"{ENV_PREFIX}LOG_FORMAT"

    WEBHOOK_TIMEOUT = f"{ENV_PREFIX}WEBHOOK_TIMEOUT"
    WEBHOOK_VERIFY_TLS = f"{ENV_PREFIX}WEBHOOK_VERIFY_TLS"
    WEBHOOK_PARALLEL = f"{ENV_PREFIX}WEBHOOK_PARALLEL"
    WEBHOOK_STRICT_STATUS = f"{ENV_PREFIX}WEBHOOK_STRICT_STATUS"
    DEFAULT_LANGUAGE = f"{ENV_PREFIX}DEFAULT_LANGUAGE"

    HOST_BACKEND = f"{ENV_PREFIX}HOST_BACKEND"
    HOST_FIXTURES = f"{ENV_PREFIX}HOST_FIXTURES"
    REMOTECONTROL_URL = f"{ENV_PREFIX}REMOTECONTROL_URL"
    REMOTECONTROL_USERNAME = f"{ENV_PREFIX}REMOTECONTROL_USERNAME"
    REMOTECONTROL_PASSWORD = f"{ENV_PREFIX}REMOTECONTROL_PASSWORD"

    # Older deployments
    LEGACY_LIMESURVEY_URL = "LIMESURVEY_URL"
    LEGACY_LIMESURVEY_USERNAME = "LIMESURVEY_USERNAME"
    LEGACY_LIMESURVEY_PASSWORD = "LIMESURVEY_PASSWORD"


def parse_bool(raw: str) -> bool:
    """Read a flag written as true/false, 1/0, yes/no or on/off."""
    value = raw.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise ValueError(f"not a boolean: {raw!r}")


def get_env_value(
    env_var: str,
    default: T,
    type_converter: Callable[[str], Any] = str,
    fallback_env_var: Optional[str] = None,
) -> T:
    """
    Read ``env_var`` (or ``fallback_env_var`` when it is unset) and convert it.

    Args:
        env_var: Variable to read
        default: Returned when neither variable is set
        type_converter: str, int, float or bool
        fallback_env_var: Legacy name consulted second

    Raises:
        ValueError: The value does not convert; the message names the variable
    """
    name, raw = env_var, os.getenv(env_var)
    if raw is None and fallback_env_var:
        name, raw = fallback_env_var, os.getenv(fallback_env_var)
    if raw is None:
        return default

    converter = parse_bool if type_converter is bool else type_converter
    try:
        return converter(raw)
    except ValueError as e:
        raise ValueError(f"Invalid value for {name}: {e}") from e


def get_config_value(
    cli_arg: Optional[Any],
    env_var: str,
    default: T,
    type_converter: Callable[[str], Any] = str,
    fallback_env_var: Optional[str] = None,
) -> T:
    """Resolve one setting; a CLI value wins over the environment, which wins over ``default``."""
    if cli_arg is not None:
        return cli_arg
    return get_env_value(env_var, default, type_converter, fallback_env_var)


def get_bool_config_value(
    cli_flag: Optional[bool],
    env_var: str,
    default: bool,
    fallback_env_var: Optional[str] = None,
) -> bool:
    """
    Resolve a ``--feature/--no-feature`` option.

    click leaves such a flag as None when neither form was given, in which
    case the environment and then ``default`` apply.
    """
    if cli_flag is not None:
        return bool(cli_flag)
    return get_env_value(env_var, default, bool, fallback_env_var)
