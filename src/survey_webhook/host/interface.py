"""Abstract interfaces for the survey host collaborators.

The dispatch pipeline only talks to the host through these narrow
interfaces, so it can run against the in-memory host in tests and against
a real LimeSurvey installation in production.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional

from pydantic import BaseModel


class HostError(Exception):
    """Raised when the survey host cannot serve a request."""


class Participant(BaseModel):
    """Contact details of a survey participant, looked up by token."""

    firstname: Optional[str] = None
    lastname: Optional[str] = None
    email: Optional[str] = None


class SettingsProvider(ABC):
    """Read-only access to persisted plugin settings."""

    @abstractmethod
    def get_global_setting(self, name: str, default: Any = None) -> Any:
        """
        Get a global setting.

        Args:
            name: Setting name
            default: Value returned when the setting is not stored

        Returns:
            The stored value or the default
        """
        pass

    @abstractmethod
    def get_survey_setting(self, name: str, survey_id: int, default: Any = None) -> Any:
        """
        Get a setting scoped to one survey.

        Args:
            name: Setting name
            survey_id: Survey the setting belongs to
            default: Value returned when the setting is not stored

        Returns:
            The stored value or the default
        """
        pass


class SettingsStore(SettingsProvider):
    """Settings provider that also accepts writes from the admin path."""

    @abstractmethod
    def set_global_setting(self, name: str, value: Any) -> None:
        """Store a global setting."""
        pass

    @abstractmethod
    def set_survey_setting(self, name: str, survey_id: int, value: Any) -> None:
        """Store a setting scoped to one survey."""
        pass


class ResponseStore(ABC):
    """Access to stored survey responses."""

    @abstractmethod
    async def get_response(self, survey_id: int, response_id: int) -> Optional[dict]:
        """
        Fetch a raw response record.

        Args:
            survey_id: Survey ID
            response_id: Response ID

        Returns:
            Mapping of question codes to answers (plus submitdate, token,
            startlanguage), or None if the response does not exist

        Raises:
            HostError: If the host cannot be queried
        """
        pass


class ExportRenderer(ABC):
    """Human-readable exports of survey responses."""

    @abstractmethod
    async def export_response(
        self,
        survey_id: int,
        response_ids: List[int],
        language: str,
        document_type: str = "json",
        header_mode: str = "full",
        answer_mode: str = "label",
    ) -> Optional[Any]:
        """
        Render responses with question text headings and answer labels.

        Args:
            survey_id: Survey ID
            response_ids: Responses to export
            language: Language code used for question and answer texts
            document_type: Export format
            header_mode: 'full' for question text, 'code' for question codes
            answer_mode: 'label' for answer texts, 'code' for answer codes

        Returns:
            The exported document, or None if nothing could be exported

        Raises:
            HostError: If the host cannot be queried
        """
        pass


class ParticipantDirectory(ABC):
    """Lookup of participants in a survey's token table."""

    @abstractmethod
    async def find_participant(self, survey_id: int, token: str) -> Optional[Participant]:
        """
        Find a participant by access token.

        Args:
            survey_id: Survey ID
            token: Participant access token

        Returns:
            Participant details, or None when no record matches

        Raises:
            HostError: If the host cannot be queried
        """
        pass
