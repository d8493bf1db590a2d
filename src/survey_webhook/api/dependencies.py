"""FastAPI dependency injection for settings and the completion handler."""

from typing import Optional

from ..config import Config
from ..host.interface import SettingsStore
from ..subscriber.event_handler import SurveyCompletionHandler
from ..webhook.resolver import ConfigurationResolver

# Global instances (set during app startup)
_config_instance: Optional[Config] = None
_settings_store_instance: Optional[SettingsStore] = None
_handler_instance: Optional[SurveyCompletionHandler] = None


class NotReadyError(RuntimeError):
    """A request arrived before the application wired its dependencies."""


def set_config_instance(config: Config) -> None:
    """
    Set the global Config instance.

    Args:
        config: The Config instance
    """
    global _config_instance
    _config_instance = config


def set_settings_store_instance(settings_store: SettingsStore) -> None:
    """
    Set the global settings store.

    Args:
        settings_store: Store used by the settings endpoints
    """
    global _settings_store_instance
    _settings_store_instance = settings_store


def set_handler_instance(handler: SurveyCompletionHandler) -> None:
    """
    Set the global SurveyCompletionHandler instance.

    Args:
        handler: Handler invoked for completion notifications
    """
    global _handler_instance
    _handler_instance = handler


def reset_instances() -> None:
    """Forget all instances, e.g. between application runs in one process."""
    global _config_instance, _settings_store_instance, _handler_instance
    _config_instance = None
    _settings_store_instance = None
    _handler_instance = None


def get_config() -> Config:
    """
    Dependency to get the Config instance.

    Raises:
        NotReadyError: If Config instance has not been set
    """
    if _config_instance is None:
        raise NotReadyError("Config instance not initialized")
    return _config_instance


def get_settings_store() -> SettingsStore:
    """
    Dependency to get the settings store.

    Raises:
        NotReadyError: If the settings store has not been set
    """
    if _settings_store_instance is None:
        raise NotReadyError("Settings store not initialized")
    return _settings_store_instance


def get_resolver() -> ConfigurationResolver:
    """Dependency to get a resolver over the current settings store."""
    return ConfigurationResolver(get_settings_store())


def get_handler() -> SurveyCompletionHandler:
    """
    Dependency to get the SurveyCompletionHandler instance.

    Raises:
        NotReadyError: If the handler has not been set

    Example:
        ```python
        @router.post("/events/survey-completed")
        async def survey_completed(handler: SurveyCompletionHandler = Depends(get_handler)):
            return await handler.handle_survey_completed(survey_id, response_id)
        ```
    """
    if _handler_instance is None:
        raise NotReadyError("SurveyCompletionHandler instance not initialized")
    return _handler_instance
