"""Settings store backed by the plugin_settings table."""

import json
import logging
from typing import Any, Optional

from ..constants import SCOPE_GLOBAL, SCOPE_SURVEY
from ..host.interface import SettingsStore
from .engine import DatabaseEngine
from .models import PluginSetting

logger = logging.getLogger(__name__)


class DatabaseSettingsStore(SettingsStore):
    """Persist global and per-survey settings as JSON values.

    Every read opens its own session, so values saved through the admin
    path are visible to the next dispatch without any cache invalidation.
    """

    def __init__(self, db_engine: DatabaseEngine):
        self.db_engine = db_engine

    def get_global_setting(self, name: str, default: Any = None) -> Any:
        return self._get(name, SCOPE_GLOBAL, 0, default)

    def get_survey_setting(self, name: str, survey_id: int, default: Any = None) -> Any:
        return self._get(name, SCOPE_SURVEY, int(survey_id), default)

    def set_global_setting(self, name: str, value: Any) -> None:
        self._set(name, SCOPE_GLOBAL, 0, value)

    def set_survey_setting(self, name: str, survey_id: int, value: Any) -> None:
        self._set(name, SCOPE_SURVEY, int(survey_id), value)

    def _get(self, name: str, scope: str, scope_id: int, default: Any) -> Any:
        with self.db_engine.session_scope() as session:
            row = (
                session.query(PluginSetting)
                .filter_by(name=name, scope=scope, scope_id=scope_id)
                .first()
            )
            if row is None:
                return default
            return self._decode(row.value)

    def _set(self, name: str, scope: str, scope_id: int, value: Any) -> None:
        encoded = json.dumps(value)
        with self.db_engine.session_scope() as session:
            row = (
                session.query(PluginSetting)
                .filter_by(name=name, scope=scope, scope_id=scope_id)
                .first()
            )
            if row is None:
                session.add(
                    PluginSetting(name=name, scope=scope, scope_id=scope_id, value=encoded)
                )
            else:
                row.value = encoded
        logger.debug(f"Stored setting {scope}:{scope_id}:{name}")

    @staticmethod
    def _decode(value: Optional[str]) -> Any:
        if value is None:
            return None
        return json.loads(value)
