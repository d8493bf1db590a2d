"""Resolution of webhook URLs, auth token and flags for a survey."""

import logging
import re
from typing import Any, List, Optional, Sequence, Union

from ..constants import (
    SETTING_AUTH_TOKEN,
    SETTING_DEBUG,
    SETTING_DEFAULT_AUTH_TOKEN,
    SETTING_DEFAULT_URL,
    SETTING_ENABLED,
    SETTING_WEBHOOK_URLS,
    as_bool,
)
from ..host.interface import SettingsProvider
from .models import SurveyWebhookConfig

logger = logging.getLogger(__name__)

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def parse_urls(text: Optional[str]) -> List[str]:
    """
    Split a multi-line URL setting into a list of URLs.

    Handles \\n, \\r\\n and \\r line endings, strips each line and drops
    blank lines. Order is preserved; URLs are not validated.

    Args:
        text: One URL per line

    Returns:
        List of non-empty, trimmed URLs
    """
    if not text:
        return []
    lines = (line.strip() for line in _LINE_BREAK.split(text))
    return [line for line in lines if line]


def parse_survey_ids(value: Union[str, Sequence[Any]]) -> List[str]:
    """
    Parse a legacy comma-separated survey allow-list.

    Args:
        value: "123, 456" style string or a list of IDs

    Returns:
        List of trimmed ID strings (an empty string gives [""])
    """
    if isinstance(value, str):
        value = value.split(",")
    return [str(survey_id).strip() for survey_id in value]


def is_survey_enabled(survey_id: Union[int, str], enabled_ids: Sequence[str]) -> bool:
    """Check a survey against a legacy allow-list parsed by parse_survey_ids."""
    return str(survey_id) in enabled_ids


class ConfigurationResolver:
    """Derive the effective webhook configuration of a survey.

    Survey-specific settings win; global defaults fill the gaps. Settings
    are read on every call, nothing is cached.
    """

    def __init__(self, settings: SettingsProvider):
        self.settings = settings

    def is_enabled(self, survey_id: int) -> bool:
        return as_bool(self.settings.get_survey_setting(SETTING_ENABLED, survey_id, False))

    def is_debug_enabled(self) -> bool:
        return as_bool(self.settings.get_global_setting(SETTING_DEBUG, False))

    def resolve_urls(self, survey_id: int) -> List[str]:
        """
        Get the webhook URLs of a survey.

        Returns:
            The survey's own URLs if any, otherwise the global default URL as
            a single-element list, otherwise an empty list
        """
        survey_urls = self.settings.get_survey_setting(SETTING_WEBHOOK_URLS, survey_id, "")
        if isinstance(survey_urls, (list, tuple)):
            survey_urls = "\n".join(str(url) for url in survey_urls)

        urls = parse_urls(survey_urls)
        if urls:
            return urls

        default_url = (self.settings.get_global_setting(SETTING_DEFAULT_URL, "") or "").strip()
        if default_url:
            return [default_url]

        return []

    def resolve_auth_token(self, survey_id: int) -> Optional[str]:
        survey_token = self.settings.get_survey_setting(SETTING_AUTH_TOKEN, survey_id, "")
        if survey_token:
            return survey_token

        default_token = self.settings.get_global_setting(SETTING_DEFAULT_AUTH_TOKEN, "")
        return default_token or None

    def resolve(self, survey_id: int) -> SurveyWebhookConfig:
        """Resolve enablement, URLs and auth token in one go."""
        return SurveyWebhookConfig(
            enabled=self.is_enabled(survey_id),
            urls=self.resolve_urls(survey_id),
            auth_token=self.resolve_auth_token(survey_id),
        )
