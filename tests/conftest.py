"""Shared pytest fixtures for Survey Webhook tests."""

import os
import tempfile
from typing import AsyncGenerator, Generator

import pytest
import pytest_asyncio

from survey_webhook.config import Config
from survey_webhook.constants import (
    SETTING_AUTH_TOKEN,
    SETTING_DEFAULT_AUTH_TOKEN,
    SETTING_DEFAULT_URL,
    SETTING_ENABLED,
    SETTING_WEBHOOK_URLS,
)
from survey_webhook.database.engine import DatabaseEngine
from survey_webhook.database.settings import DatabaseSettingsStore
from survey_webhook.host.memory import InMemoryHost, InMemorySettingsStore
from survey_webhook.subscriber.event_handler import SurveyCompletionHandler
from survey_webhook.webhook.dispatcher import WebhookDispatcher
from survey_webhook.webhook.resolver import ConfigurationResolver

SURVEY_ID = 100
RESPONSE_ID = 42
PARTICIPANT_TOKEN = "PARTXYZ"


@pytest.fixture(scope="function")
def temp_db_path() -> Generator[str, None, None]:
    """Create a temporary database path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield os.path.join(tmpdir, "test.db")


@pytest.fixture(scope="function")
def test_config(temp_db_path: str) -> Config:
    """Create a test configuration."""
    return Config(
        db_path=temp_db_path,
        api_host="127.0.0.1",
        api_port=8000,
        metrics_enabled=False,
        log_level="DEBUG",
        log_format="text",
        webhook_timeout=5.0,
    )


@pytest.fixture(scope="function")
def db_engine(temp_db_path: str) -> Generator[DatabaseEngine, None, None]:
    """Create an initialized database engine."""
    db = DatabaseEngine(temp_db_path)
    db.initialize()
    yield db
    db.close()


@pytest.fixture(scope="function")
def db_settings_store(db_engine: DatabaseEngine) -> DatabaseSettingsStore:
    """Settings store backed by a temporary database."""
    return DatabaseSettingsStore(db_engine)


@pytest.fixture(scope="function")
def settings_store() -> InMemorySettingsStore:
    """Settings with survey 100 enabled and two webhook URLs."""
    return InMemorySettingsStore(
        global_settings={
            SETTING_DEFAULT_URL: "",
            SETTING_DEFAULT_AUTH_TOKEN: "",
        },
        survey_settings={
            SURVEY_ID: {
                SETTING_ENABLED: True,
                SETTING_WEBHOOK_URLS: "https://a.example/hook\nhttps://b.example/hook",
                SETTING_AUTH_TOKEN: "tok",
            },
        },
    )


@pytest.fixture(scope="function")
def memory_host() -> InMemoryHost:
    """Host holding response 42 of survey 100, its readable export and its participant."""
    host = InMemoryHost()
    host.add_response(
        SURVEY_ID,
        RESPONSE_ID,
        {
            "id": RESPONSE_ID,
            "submitdate": "2024-05-01 10:00:00",
            "token": PARTICIPANT_TOKEN,
            "startlanguage": "en",
            "Q1": "A2",
        },
    )
    host.add_export(
        SURVEY_ID,
        RESPONSE_ID,
        {"Response ID": RESPONSE_ID, "How satisfied are you?": "Very satisfied"},
    )
    host.add_participant(
        SURVEY_ID,
        PARTICIPANT_TOKEN,
        {"firstname": "Jane", "lastname": "Roe", "email": "jane@example.org"},
    )
    return host


@pytest_asyncio.fixture(scope="function")
async def dispatcher() -> AsyncGenerator[WebhookDispatcher, None]:
    """Webhook dispatcher; tests patch its client's post method."""
    dispatcher = WebhookDispatcher(timeout=5.0)
    yield dispatcher
    await dispatcher.close()


@pytest.fixture(scope="function")
def handler(
    settings_store: InMemorySettingsStore,
    memory_host: InMemoryHost,
    dispatcher: WebhookDispatcher,
) -> SurveyCompletionHandler:
    """Completion handler wired to the in-memory host and settings."""
    return SurveyCompletionHandler(
        resolver=ConfigurationResolver(settings_store),
        responses=memory_host,
        participants=memory_host,
        exporter=memory_host,
        dispatcher=dispatcher,
    )
