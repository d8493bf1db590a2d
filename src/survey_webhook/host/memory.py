"""In-memory survey host for development and testing without LimeSurvey."""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .interface import (
    ExportRenderer,
    Participant,
    ParticipantDirectory,
    ResponseStore,
    SettingsStore,
)

logger = logging.getLogger(__name__)


class InMemoryHost(ResponseStore, ExportRenderer, ParticipantDirectory):
    """Serve responses, exports and participants from plain dictionaries.

    Fixture files use the layout::

        {
          "responses": {"<survey_id>": {"<response_id>": {...}}},
          "exports": {"<survey_id>": {"<response_id>": {...}}},
          "participants": {"<survey_id>": {"<token>": {"firstname": ...}}}
        }
    """

    def __init__(self):
        self._responses: Dict[Tuple[int, int], dict] = {}
        self._exports: Dict[Tuple[int, int], Any] = {}
        self._participants: Dict[Tuple[int, str], Participant] = {}

    @classmethod
    def from_file(cls, path: str) -> "InMemoryHost":
        """
        Load a host from a JSON fixture file.

        Args:
            path: Path to the fixture file

        Returns:
            Populated InMemoryHost

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file is not valid JSON
        """
        with open(Path(path), "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON in {path}: {e}") from e

        host = cls()
        for survey_id, responses in data.get("responses", {}).items():
            for response_id, response in responses.items():
                host.add_response(int(survey_id), int(response_id), response)
        for survey_id, exports in data.get("exports", {}).items():
            for response_id, export in exports.items():
                host.add_export(int(survey_id), int(response_id), export)
        for survey_id, participants in data.get("participants", {}).items():
            for token, participant in participants.items():
                host.add_participant(int(survey_id), token, participant)

        logger.info(
            f"Loaded host fixtures from {path}: {len(host._responses)} responses, "
            f"{len(host._exports)} exports, {len(host._participants)} participants"
        )
        return host

    def add_response(self, survey_id: int, response_id: int, response: dict) -> None:
        self._responses[(survey_id, response_id)] = dict(response)

    def add_export(self, survey_id: int, response_id: int, export: Any) -> None:
        self._exports[(survey_id, response_id)] = export

    def add_participant(self, survey_id: int, token: str, participant: Any) -> None:
        if not isinstance(participant, Participant):
            participant = Participant(**participant)
        self._participants[(survey_id, token)] = participant

    async def get_response(self, survey_id: int, response_id: int) -> Optional[dict]:
        response = self._responses.get((survey_id, response_id))
        # Callers get a copy so the fixture cannot be mutated through them
        return copy.deepcopy(response) if response is not None else None

    async def export_response(
        self,
        survey_id: int,
        response_ids: List[int],
        language: str,
        document_type: str = "json",
        header_mode: str = "full",
        answer_mode: str = "label",
    ) -> Optional[Any]:
        exports = [
            self._exports[(survey_id, response_id)]
            for response_id in response_ids
            if (survey_id, response_id) in self._exports
        ]
        if not exports:
            return None
        if len(exports) == 1:
            return copy.deepcopy(exports[0])
        return copy.deepcopy(exports)

    async def find_participant(self, survey_id: int, token: str) -> Optional[Participant]:
        return self._participants.get((survey_id, token))


class InMemorySettingsStore(SettingsStore):
    """Settings store kept in a dictionary, for tests and one-off runs."""

    def __init__(
        self,
        global_settings: Optional[Dict[str, Any]] = None,
        survey_settings: Optional[Dict[int, Dict[str, Any]]] = None,
    ):
        self._global: Dict[str, Any] = dict(global_settings or {})
        self._survey: Dict[int, Dict[str, Any]] = {
            int(survey_id): dict(values) for survey_id, values in (survey_settings or {}).items()
        }

    def get_global_setting(self, name: str, default: Any = None) -> Any:
        return self._global.get(name, default)

    def get_survey_setting(self, name: str, survey_id: int, default: Any = None) -> Any:
        return self._survey.get(int(survey_id), {}).get(name, default)

    def set_global_setting(self, name: str, value: Any) -> None:
        self._global[name] = value

    def set_survey_setting(self, name: str, survey_id: int, value: Any) -> None:
        self._survey.setdefault(int(survey_id), {})[name] = value
