"""Unit tests for the in-memory host and settings store."""

import json

import pytest

from survey_webhook.host.interface import Participant
from survey_webhook.host.memory import InMemoryHost, InMemorySettingsStore


@pytest.mark.asyncio
class TestInMemoryHost:
    """Test InMemoryHost lookups."""

    async def test_get_response(self, memory_host):
        """Test a stored response is returned."""
        response = await memory_host.get_response(100, 42)
        assert response["token"] == "PARTXYZ"

    async def test_get_response_missing(self, memory_host):
        """Test an unknown response gives None."""
        assert await memory_host.get_response(100, 999) is None
        assert await memory_host.get_response(101, 42) is None

    async def test_get_response_returns_copy(self, memory_host):
        """Test callers cannot modify the stored response."""
        response = await memory_host.get_response(100, 42)
        response["Q1"] = "changed"
        assert (await memory_host.get_response(100, 42))["Q1"] == "A2"

    async def test_export_single(self, memory_host):
        """Test a single-response export returns the mapping."""
        export = await memory_host.export_response(100, [42], "en")
        assert export["How satisfied are you?"] == "Very satisfied"

    async def test_export_several(self, memory_host):
        """Test exporting several responses returns a list."""
        memory_host.add_export(100, 43, {"Response ID": 43})
        export = await memory_host.export_response(100, [42, 43], "en")
        assert isinstance(export, list)
        assert len(export) == 2

    async def test_export_missing(self, memory_host):
        """Test exporting an unknown response gives None."""
        assert await memory_host.export_response(100, [999], "en") is None

    async def test_find_participant(self, memory_host):
        """Test participants are found by survey and token."""
        participant = await memory_host.find_participant(100, "PARTXYZ")
        assert participant == Participant(firstname="Jane", lastname="Roe", email="jane@example.org")
        assert await memory_host.find_participant(100, "OTHER") is None
        assert await memory_host.find_participant(101, "PARTXYZ") is None

    async def test_from_file(self, tmp_path):
        """Test loading a fixture file."""
        fixture = tmp_path / "host.json"
        fixture.write_text(json.dumps({
            "responses": {"100": {"42": {"token": "T1", "Q1": "A1"}}},
            "exports": {"100": {"42": {"Question 1": "Answer 1"}}},
            "participants": {"100": {"T1": {"firstname": "Jane"}}},
        }))

        host = InMemoryHost.from_file(str(fixture))

        assert (await host.get_response(100, 42))["Q1"] == "A1"
        assert await host.export_response(100, [42], "en") == {"Question 1": "Answer 1"}
        assert (await host.find_participant(100, "T1")).firstname == "Jane"

    async def test_from_file_invalid_json(self, tmp_path):
        """Test a broken fixture file raises ValueError."""
        fixture = tmp_path / "host.json"
        fixture.write_text("{not json")
        with pytest.raises(ValueError):
            InMemoryHost.from_file(str(fixture))

    async def test_from_file_missing(self, tmp_path):
        """Test a missing fixture file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            InMemoryHost.from_file(str(tmp_path / "missing.json"))


class TestInMemorySettingsStore:
    """Test InMemorySettingsStore."""

    def test_defaults(self):
        """Test unknown settings give the default."""
        store = InMemorySettingsStore()
        assert store.get_global_setting("debug", False) is False
        assert store.get_survey_setting("enabled", 1, "x") == "x"

    def test_set_and_get(self):
        """Test global and survey scopes are kept apart."""
        store = InMemorySettingsStore()
        store.set_global_setting("debug", True)
        store.set_survey_setting("enabled", 1, True)

        assert store.get_global_setting("debug") is True
        assert store.get_survey_setting("enabled", 1) is True
        assert store.get_survey_setting("enabled", 2) is None
        assert store.get_global_setting("enabled") is None
