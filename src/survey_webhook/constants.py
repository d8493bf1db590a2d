"""Common constants used across Survey Webhook."""

# Name of the host notification that triggers a dispatch
EVENT_AFTER_SURVEY_COMPLETE = "afterSurveyComplete"

# Placeholder the survey host emits for unset/malformed submit dates
LEGACY_SUBMIT_DATE = "1980-01-01 00:00:00"
SUBMIT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

DEFAULT_LANGUAGE = "en"

# Setting scopes
SCOPE_GLOBAL = "global"
SCOPE_SURVEY = "survey"

# Global settings
SETTING_DEFAULT_URL = "default_url"
SETTING_DEFAULT_AUTH_TOKEN = "default_auth_token"
SETTING_DEBUG = "debug"

# Per-survey settings
SETTING_ENABLED = "enabled"
SETTING_WEBHOOK_URLS = "webhook_urls"
SETTING_AUTH_TOKEN = "auth_token"

# Participant fields sent in the payload
PARTICIPANT_FIELDS = ("firstname", "lastname", "email")

TRUTHY_STRINGS = ("true", "1", "yes", "on")

def as_bool(value) -> bool:
    """Interpret a stored setting value as a boolean flag."""
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY_STRINGS
    return bool(value)
