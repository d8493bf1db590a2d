"""Unit tests for webhook configuration resolution."""

import pytest

from survey_webhook.constants import (
    SETTING_AUTH_TOKEN,
    SETTING_DEBUG,
    SETTING_DEFAULT_AUTH_TOKEN,
    SETTING_DEFAULT_URL,
    SETTING_ENABLED,
    SETTING_WEBHOOK_URLS,
)
from survey_webhook.host.memory import InMemorySettingsStore
from survey_webhook.webhook.resolver import (
    ConfigurationResolver,
    is_survey_enabled,
    parse_survey_ids,
    parse_urls,
)


def make_resolver(global_settings=None, survey_settings=None) -> ConfigurationResolver:
    """Build a resolver over survey 7's settings."""
    return ConfigurationResolver(
        InMemorySettingsStore(
            global_settings=global_settings or {},
            survey_settings={7: survey_settings or {}},
        )
    )


class TestParseUrls:
    """Test splitting the multi-line URL setting."""

    def test_empty_string(self):
        """Test empty input gives no URLs."""
        assert parse_urls("") == []

    def test_none(self):
        """Test None gives no URLs."""
        assert parse_urls(None) == []

    def test_blank_lines_dropped(self):
        """Test blank lines and the trailing newline are dropped."""
        assert parse_urls("https://a\n\n\nhttps://b\n") == ["https://a", "https://b"]

    def test_mixed_line_endings_and_whitespace(self):
        """Test all newline styles split and each line is trimmed."""
        assert parse_urls("  https://a  \r\nhttps://b\rhttps://c") == [
            "https://a",
            "https://b",
            "https://c",
        ]

    def test_whitespace_only_lines(self):
        """Test whitespace-only input gives no URLs."""
        assert parse_urls(" \n\t\r\n  ") == []

    def test_order_preserved(self):
        """Test URLs keep their relative order, duplicates included."""
        assert parse_urls("https://z\nhttps://a\nhttps://z") == [
            "https://z",
            "https://a",
            "https://z",
        ]

    def test_urls_not_validated(self):
        """Test any non-blank line is accepted as a URL."""
        assert parse_urls("not a url") == ["not a url"]


class TestLegacySurveyIds:
    """Test the legacy comma-separated allow-list helpers."""

    def test_parse_comma_separated(self):
        """Test IDs are split and trimmed."""
        assert parse_survey_ids("123, 456 ,789") == ["123", "456", "789"]

    def test_parse_list(self):
        """Test a list of IDs is normalized to trimmed strings."""
        assert parse_survey_ids([123, " 456 "]) == ["123", "456"]

    def test_parse_empty_string(self):
        """Test an empty string gives a single empty ID."""
        assert parse_survey_ids("") == [""]

    def test_is_survey_enabled(self):
        """Test membership works for int and string survey IDs."""
        enabled = parse_survey_ids("123,456")
        assert is_survey_enabled(123, enabled) is True
        assert is_survey_enabled("456", enabled) is True
        assert is_survey_enabled(789, enabled) is False


class TestConfigurationResolver:
    """Test ConfigurationResolver precedence rules."""

    def test_disabled_by_default(self):
        """Test a survey without settings is disabled."""
        assert make_resolver().is_enabled(7) is False

    def test_enabled_flag(self):
        """Test the per-survey enabled flag."""
        assert make_resolver(survey_settings={SETTING_ENABLED: True}).is_enabled(7) is True

    @pytest.mark.parametrize("value", ["1", "true", "Yes", "on"])
    def test_enabled_truthy_strings(self, value):
        """Test truthy form values count as enabled."""
        assert make_resolver(survey_settings={SETTING_ENABLED: value}).is_enabled(7) is True

    @pytest.mark.parametrize("value", ["0", "false", "", "off"])
    def test_enabled_falsy_strings(self, value):
        """Test falsy form values count as disabled."""
        assert make_resolver(survey_settings={SETTING_ENABLED: value}).is_enabled(7) is False

    def test_debug_flag(self):
        """Test the global debug flag."""
        assert make_resolver().is_debug_enabled() is False
        assert make_resolver(global_settings={SETTING_DEBUG: True}).is_debug_enabled() is True

    def test_survey_urls_win_over_default(self):
        """Test survey URLs replace the global default entirely."""
        resolver = make_resolver(
            global_settings={SETTING_DEFAULT_URL: "gd"},
            survey_settings={SETTING_WEBHOOK_URLS: "u1\nu2"},
        )
        assert resolver.resolve_urls(7) == ["u1", "u2"]

    def test_default_url_fallback(self):
        """Test the global default URL is used when the survey has none."""
        resolver = make_resolver(
            global_settings={SETTING_DEFAULT_URL: "gd"},
            survey_settings={SETTING_WEBHOOK_URLS: ""},
        )
        assert resolver.resolve_urls(7) == ["gd"]

    def test_blank_survey_urls_fall_back(self):
        """Test survey URLs made of blank lines fall back to the default."""
        resolver = make_resolver(
            global_settings={SETTING_DEFAULT_URL: " gd "},
            survey_settings={SETTING_WEBHOOK_URLS: "\n  \r\n"},
        )
        assert resolver.resolve_urls(7) == ["gd"]

    def test_no_urls(self):
        """Test no survey URLs and no default gives no URLs."""
        resolver = make_resolver(
            global_settings={SETTING_DEFAULT_URL: ""},
            survey_settings={SETTING_WEBHOOK_URLS: ""},
        )
        assert resolver.resolve_urls(7) == []

    def test_survey_urls_as_list(self):
        """Test a stored list of URLs is treated as lines."""
        resolver = make_resolver(survey_settings={SETTING_WEBHOOK_URLS: ["u1", " ", "u2 "]})
        assert resolver.resolve_urls(7) == ["u1", "u2"]

    def test_auth_token_precedence(self):
        """Test survey token, then default token, then None."""
        assert make_resolver(
            global_settings={SETTING_DEFAULT_AUTH_TOKEN: "default"},
            survey_settings={SETTING_AUTH_TOKEN: "survey"},
        ).resolve_auth_token(7) == "survey"
        assert make_resolver(
            global_settings={SETTING_DEFAULT_AUTH_TOKEN: "default"},
            survey_settings={SETTING_AUTH_TOKEN: ""},
        ).resolve_auth_token(7) == "default"
        assert make_resolver().resolve_auth_token(7) is None

    def test_settings_read_fresh(self):
        """Test changes to the store are seen by the next resolution."""
        store = InMemorySettingsStore(survey_settings={7: {SETTING_WEBHOOK_URLS: "u1"}})
        resolver = ConfigurationResolver(store)
        assert resolver.resolve_urls(7) == ["u1"]

        store.set_survey_setting(SETTING_WEBHOOK_URLS, 7, "u2")
        assert resolver.resolve_urls(7) == ["u2"]

    def test_resolve(self):
        """Test resolve combines enablement, URLs and token."""
        config = make_resolver(
            global_settings={SETTING_DEFAULT_URL: "gd", SETTING_DEFAULT_AUTH_TOKEN: "t"},
            survey_settings={SETTING_ENABLED: "1"},
        ).resolve(7)
        assert config.enabled is True
        assert config.urls == ["gd"]
        assert config.auth_token == "t"
