"""Unit tests for the database-backed settings store."""

from survey_webhook.constants import SCOPE_GLOBAL, SCOPE_SURVEY
from survey_webhook.database.models import PluginSetting
from survey_webhook.webhook.resolver import ConfigurationResolver


class TestDatabaseSettingsStore:
    """Test DatabaseSettingsStore."""

    def test_missing_setting_returns_default(self, db_settings_store):
        """Test an unknown setting gives the default."""
        assert db_settings_store.get_global_setting("default_url", "") == ""
        assert db_settings_store.get_survey_setting("enabled", 100, False) is False

    def test_global_round_trip_types(self, db_settings_store):
        """Test values keep their JSON type."""
        db_settings_store.set_global_setting("debug", True)
        db_settings_store.set_global_setting("default_url", "https://gd.example")

        assert db_settings_store.get_global_setting("debug") is True
        assert db_settings_store.get_global_setting("default_url") == "https://gd.example"

    def test_scopes_are_separate(self, db_settings_store):
        """Test the same name is stored independently per scope and survey."""
        db_settings_store.set_survey_setting("auth_token", 100, "a")
        db_settings_store.set_survey_setting("auth_token", 200, "b")
        db_settings_store.set_global_setting("auth_token", "g")

        assert db_settings_store.get_survey_setting("auth_token", 100) == "a"
        assert db_settings_store.get_survey_setting("auth_token", 200) == "b"
        assert db_settings_store.get_global_setting("auth_token") == "g"

    def test_update_keeps_single_row(self, db_settings_store, db_engine):
        """Test setting a value twice updates the row in place."""
        db_settings_store.set_survey_setting("enabled", 100, False)
        db_settings_store.set_survey_setting("enabled", 100, True)

        with db_engine.session_scope() as session:
            rows = session.query(PluginSetting).filter_by(name="enabled").all()
            assert len(rows) == 1
            assert rows[0].scope == SCOPE_SURVEY
            assert rows[0].scope_id == 100
            assert rows[0].value == "true"

        assert db_settings_store.get_survey_setting("enabled", 100) is True

    def test_global_scope_id_zero(self, db_settings_store, db_engine):
        """Test global settings are stored with scope ID 0."""
        db_settings_store.set_global_setting("debug", False)

        with db_engine.session_scope() as session:
            row = session.query(PluginSetting).filter_by(name="debug").one()
            assert row.scope == SCOPE_GLOBAL
            assert row.scope_id == 0

    def test_string_survey_id(self, db_settings_store):
        """Test survey IDs given as strings address the same row."""
        db_settings_store.set_survey_setting("enabled", "100", True)
        assert db_settings_store.get_survey_setting("enabled", 100) is True

    def test_changes_visible_to_resolver(self, db_settings_store):
        """Test a saved setting is used by the next resolution."""
        resolver = ConfigurationResolver(db_settings_store)
        assert resolver.resolve_urls(100) == []

        db_settings_store.set_survey_setting("webhook_urls", 100, "https://a\nhttps://b")
        assert resolver.resolve_urls(100) == ["https://a", "https://b"]
