"""Configuration for the webhook server and the commands sharing its database.

All configuration uses the SURVEY_WEBHOOK_* environment variable prefix.
"""

from dataclasses import dataclass
from typing import Optional

from .base import EnvVars, get_bool_config_value, get_config_value

HOST_BACKENDS = ("memory", "remotecontrol")


@dataclass
class Config:
    """Application configuration.

    Configuration can be set via:
    1. CLI arguments (highest priority)
    2. Environment variables
    3. Default values (lowest priority)

    Webhook targets, auth tokens and the debug flag are not part of this
    class: they are persisted settings, editable at runtime through the API
    and the ``settings`` command.
    """

    # === Database ===
    db_path: str = "./data/survey_webhook.db"

    # === API ===
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_title: str = "Survey Webhook"
    api_version: str = "1.0.0"
    api_bearer_token: Optional[str] = None

    # === Prometheus ===
    metrics_enabled: bool = True

    # === Logging ===
    log_level: str = "INFO"
    log_format: str = "json"  # json|text

    # === Webhook delivery ===
    webhook_timeout: float = 30.0
    webhook_verify_tls: bool = True
    webhook_parallel: bool = False
    webhook_strict_status: bool = False
    default_language: str = "en"

    # === Survey host ===
    host_backend: str = "memory"  # memory|remotecontrol
    host_fixtures: Optional[str] = None
    remotecontrol_url: Optional[str] = None
    remotecontrol_username: Optional[str] = None
    remotecontrol_password: Optional[str] = None

    @classmethod
    def from_args_and_env(cls, cli_args: Optional[dict] = None) -> "Config":
        """
        Load configuration from CLI arguments, environment variables, and defaults.

        Priority: CLI args > Environment variables > Defaults

        Args:
            cli_args: Optional dictionary of CLI arguments

        Returns:
            Config instance

        Raises:
            ValueError: If the host backend is unknown or an environment
                variable does not convert to its type
        """
        if cli_args is None:
            cli_args = {}

        config = cls()

        # === Database ===
        config.db_path = get_config_value(cli_args.get("db_path"), EnvVars.DB_PATH, config.db_path)

        # === API ===
        config.api_host = get_config_value(
            cli_args.get("api_host"), EnvVars.API_HOST, config.api_host
        )
        config.api_port = get_config_value(
            cli_args.get("api_port"), EnvVars.API_PORT, config.api_port, int
        )
        config.api_title = get_config_value(
            cli_args.get("api_title"), EnvVars.API_TITLE, config.api_title
        )
        config.api_version = get_config_value(
            cli_args.get("api_version"), EnvVars.API_VERSION, config.api_version
        )
        config.api_bearer_token = get_config_value(
            cli_args.get("api_bearer_token"), EnvVars.API_BEARER_TOKEN, config.api_bearer_token
        )

        config.metrics_enabled = get_bool_config_value(
            cli_args.get("metrics"), EnvVars.METRICS_ENABLED, config.metrics_enabled
        )

        # === Logging ===
        config.log_level = get_config_value(
            cli_args.get("log_level"), EnvVars.LOG_LEVEL, config.log_level
        )
        config.log_format = get_config_value(
            cli_args.get("log_format"), EnvVars.LOG_FORMAT, config.log_format
        )

        # === Webhook delivery ===
        config.webhook_timeout = get_config_value(
            cli_args.get("webhook_timeout"), EnvVars.WEBHOOK_TIMEOUT, config.webhook_timeout, float
        )
        config.webhook_verify_tls = get_bool_config_value(
            cli_args.get("verify_tls"), EnvVars.WEBHOOK_VERIFY_TLS, config.webhook_verify_tls
        )
        config.webhook_parallel = get_bool_config_value(
            cli_args.get("parallel"), EnvVars.WEBHOOK_PARALLEL, config.webhook_parallel
        )
        config.webhook_strict_status = get_bool_config_value(
            cli_args.get("strict_status"),
            EnvVars.WEBHOOK_STRICT_STATUS,
            config.webhook_strict_status,
        )
        config.default_language = get_config_value(
            cli_args.get("default_language"), EnvVars.DEFAULT_LANGUAGE, config.default_language
        )

        # === Survey host (RemoteControl settings fall back to legacy LIMESURVEY_* vars) ===
        config.host_backend = get_config_value(
            cli_args.get("host_backend"), EnvVars.HOST_BACKEND, config.host_backend
        ).lower()
        config.host_fixtures = get_config_value(
            cli_args.get("host_fixtures"), EnvVars.HOST_FIXTURES, config.host_fixtures
        )
        config.remotecontrol_url = get_config_value(
            cli_args.get("remotecontrol_url"),
            EnvVars.REMOTECONTROL_URL,
            config.remotecontrol_url,
            str,
            EnvVars.LEGACY_LIMESURVEY_URL,
        )
        config.remotecontrol_username = get_config_value(
            cli_args.get("remotecontrol_username"),
            EnvVars.REMOTECONTROL_USERNAME,
            config.remotecontrol_username,
            str,
            EnvVars.LEGACY_LIMESURVEY_USERNAME,
        )
        config.remotecontrol_password = get_config_value(
            cli_args.get("remotecontrol_password"),
            EnvVars.REMOTECONTROL_PASSWORD,
            config.remotecontrol_password,
            str,
            EnvVars.LEGACY_LIMESURVEY_PASSWORD,
        )

        if config.host_backend not in HOST_BACKENDS:
            raise ValueError(
                f"Unknown host backend '{config.host_backend}' "
                f"(expected one of: {', '.join(HOST_BACKENDS)})"
            )

        return config

    def display(self) -> str:
        """
        Display configuration in human-readable format.

        Returns:
            Formatted configuration string
        """
        lines = [
            "Configuration:",
            "  Database:",
            f"    Path: {self.db_path}",
            "  API:",
            f"    Host: {self.api_host}",
            f"    Port: {self.api_port}",
            f"    Authentication: {'Enabled (Bearer token required)' if self.api_bearer_token else 'Disabled (Public API)'}",
            f"    Metrics: {'Enabled' if self.metrics_enabled else 'Disabled'}",
            "  Logging:",
            f"    Level: {self.log_level}",
            f"    Format: {self.log_format}",
            "  Webhooks:",
            f"    Timeout: {self.webhook_timeout}s",
            f"    TLS Verification: {'Enabled' if self.webhook_verify_tls else 'Disabled'}",
            f"    Delivery: {'Parallel' if self.webhook_parallel else 'Sequential'}",
            f"    Status Check: {'Strict (non-2xx fails)' if self.webhook_strict_status else 'Lenient (any response succeeds)'}",
            f"    Default Language: {self.default_language}",
            "  Survey Host:",
            f"    Backend: {self.host_backend}",
        ]

        if self.host_backend == "remotecontrol":
            lines.extend([
                f"    URL: {self.remotecontrol_url or '(not configured)'}",
                f"    Username: {self.remotecontrol_username or '(not configured)'}",
                f"    Password: {'configured' if self.remotecontrol_password else 'not configured'}",
            ])
        else:
            lines.append(f"    Fixtures: {self.host_fixtures or '(none)'}")

        return "\n".join(lines)
