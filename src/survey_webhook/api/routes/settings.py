"""Global and per-survey webhook settings endpoints."""

import logging

from fastapi import APIRouter, Depends, Path

from ...constants import (
    SETTING_AUTH_TOKEN,
    SETTING_DEBUG,
    SETTING_DEFAULT_AUTH_TOKEN,
    SETTING_DEFAULT_URL,
    SETTING_ENABLED,
    SETTING_WEBHOOK_URLS,
    as_bool,
)
from ...host.interface import SettingsStore
from ...webhook.resolver import ConfigurationResolver
from ..dependencies import get_resolver, get_settings_store
from ..schemas import (
    EffectiveWebhookConfig,
    GlobalSettings,
    GlobalSettingsUpdate,
    SurveySettings,
    SurveySettingsUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def read_global_settings(store: SettingsStore) -> GlobalSettings:
    """Read the global settings, filling in defaults."""
    return GlobalSettings(
        default_url=store.get_global_setting(SETTING_DEFAULT_URL, "") or "",
        default_auth_token=store.get_global_setting(SETTING_DEFAULT_AUTH_TOKEN, "") or "",
        debug=as_bool(store.get_global_setting(SETTING_DEBUG, False)),
    )


def read_survey_settings(store: SettingsStore, survey_id: int) -> SurveySettings:
    """Read a survey's settings, filling in defaults."""
    urls = store.get_survey_setting(SETTING_WEBHOOK_URLS, survey_id, "") or ""
    if isinstance(urls, list):
        urls = "\n".join(str(url) for url in urls)

    return SurveySettings(
        survey_id=survey_id,
        enabled=as_bool(store.get_survey_setting(SETTING_ENABLED, survey_id, False)),
        webhook_urls=urls,
        auth_token=store.get_survey_setting(SETTING_AUTH_TOKEN, survey_id, "") or "",
    )


@router.get("/settings", response_model=GlobalSettings)
def get_global_settings(store: SettingsStore = Depends(get_settings_store)) -> GlobalSettings:
    """Get the global webhook settings."""
    return read_global_settings(store)


@router.put("/settings", response_model=GlobalSettings)
def update_global_settings(
    update: GlobalSettingsUpdate,
    store: SettingsStore = Depends(get_settings_store),
) -> GlobalSettings:
    """Update the global webhook settings. Omitted fields are left unchanged."""
    for name, value in update.model_dump(exclude_none=True).items():
        store.set_global_setting(name, value)
        logger.info(f"Global setting updated: {name}")
    return read_global_settings(store)


@router.get("/surveys/{survey_id}/settings", response_model=SurveySettings)
def get_survey_settings(
    survey_id: int = Path(..., ge=1),
    store: SettingsStore = Depends(get_settings_store),
) -> SurveySettings:
    """Get the webhook settings of a survey."""
    return read_survey_settings(store, survey_id)


@router.put("/surveys/{survey_id}/settings", response_model=SurveySettings)
def update_survey_settings(
    update: SurveySettingsUpdate,
    survey_id: int = Path(..., ge=1),
    store: SettingsStore = Depends(get_settings_store),
) -> SurveySettings:
    """Update the webhook settings of a survey. Omitted fields are left unchanged."""
    for name, value in update.model_dump(exclude_none=True).items():
        store.set_survey_setting(name, survey_id, value)
        logger.info(f"Survey {survey_id} setting updated: {name}")
    return read_survey_settings(store, survey_id)


@router.get("/surveys/{survey_id}/webhook", response_model=EffectiveWebhookConfig)
def get_effective_webhook_config(
    survey_id: int = Path(..., ge=1),
    resolver: ConfigurationResolver = Depends(get_resolver),
) -> EffectiveWebhookConfig:
    """Show the URLs and token a completion of this survey would use, after fallbacks."""
    config = resolver.resolve(survey_id)
    return EffectiveWebhookConfig(survey_id=survey_id, **config.model_dump())
