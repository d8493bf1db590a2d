"""LimeSurvey RemoteControl (JSON-RPC) implementation of the host interfaces."""

import base64
import binascii
import json
import logging
from typing import Any, List, Optional

import httpx

from ..constants import PARTICIPANT_FIELDS
from .interface import (
    ExportRenderer,
    HostError,
    Participant,
    ParticipantDirectory,
    ResponseStore,
)

logger = logging.getLogger(__name__)

# Export answer modes mapped to RemoteControl response types
ANSWER_MODES = {
    "label": "long",
    "code": "short",
}

INVALID_SESSION_STATUS = "Invalid session key"


class RemoteControlHost(ResponseStore, ExportRenderer, ParticipantDirectory):
    """Query responses and participants through LimeSurvey's RemoteControl 2 API."""

    def __init__(
        self,
        url: str,
        username: str,
        password: str,
        timeout: float = 30.0,
        verify: bool = True,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the RemoteControl client.

        Args:
            url: JSON-RPC endpoint, e.g. https://survey.example.com/index.php/admin/remotecontrol
            username: LimeSurvey user with export permission
            password: Password of that user
            timeout: HTTP request timeout in seconds
            verify: Whether to verify the server's TLS certificate
            client: Optional preconfigured httpx client
        """
        self.url = url
        self.username = username
        self.password = password
        self.client = client or httpx.AsyncClient(timeout=timeout, verify=verify)
        self._session_key: Optional[str] = None
        self._request_id = 0

        logger.info(f"RemoteControlHost initialized: url={url}, user={username}")

    async def _call(self, method: str, *params: Any) -> Any:
        """
        Issue a single JSON-RPC call.

        Raises:
            HostError: On transport errors, HTTP errors or JSON-RPC errors
        """
        self._request_id += 1
        request = {
            "jsonrpc": "2.0",
            "method": method,
            "params": list(params),
            "id": self._request_id,
        }

        try:
            response = await self.client.post(
                self.url, json=request, headers={"Content-Type": "application/json"}
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            raise HostError(
                f"RemoteControl {method} failed: HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise HostError(f"RemoteControl {method} failed: {type(e).__name__}: {e}") from e
        except ValueError as e:
            raise HostError(f"RemoteControl {method} returned invalid JSON") from e

        if not isinstance(body, dict):
            raise HostError(f"RemoteControl {method} returned {type(body).__name__}, not an object")
        if body.get("error"):
            raise HostError(f"RemoteControl {method} error: {body['error']}")

        return body.get("result")

    async def _get_session_key(self) -> str:
        if self._session_key is None:
            result = await self._call("get_session_key", self.username, self.password)
            if not isinstance(result, str):
                status = result.get("status") if isinstance(result, dict) else result
                raise HostError(f"RemoteControl login failed: {status}")
            self._session_key = result
            logger.debug("Obtained RemoteControl session key")
        return self._session_key

    async def _call_with_session(self, method: str, *params: Any) -> Any:
        """Call a method that takes the session key first, renewing an expired key once."""
        session_key = await self._get_session_key()
        result = await self._call(method, session_key, *params)

        if isinstance(result, dict) and result.get("status") == INVALID_SESSION_STATUS:
            logger.info("RemoteControl session expired, logging in again")
            self._session_key = None
            session_key = await self._get_session_key()
            result = await self._call(method, session_key, *params)

        return result

    async def _export(
        self,
        survey_id: int,
        response_ids: List[int],
        language: Optional[str],
        heading_type: str,
        response_type: str,
    ) -> List[dict]:
        """Export responses as JSON and return them as a list of mappings."""
        result = await self._call_with_session(
            "export_responses",
            survey_id,
            "json",
            language,
            "all",
            heading_type,
            response_type,
            min(response_ids),
            max(response_ids),
        )

        if isinstance(result, dict):
            # {"status": "No Data, ..."} when nothing matches
            logger.debug(f"No export data for survey {survey_id}: {result.get('status')}")
            return []

        try:
            document = json.loads(base64.b64decode(result))
        except (binascii.Error, TypeError, ValueError) as e:
            raise HostError(f"Could not decode export of survey {survey_id}") from e

        wanted = {str(response_id) for response_id in response_ids}
        return [
            response
            for response in _unwrap_responses(document)
            if str(response.get("id", "")) in wanted or not response.get("id")
        ]

    async def get_response(self, survey_id: int, response_id: int) -> Optional[dict]:
        responses = await self._export(survey_id, [response_id], None, "code", "short")
        return responses[0] if responses else None

    async def export_response(
        self,
        survey_id: int,
        response_ids: List[int],
        language: str,
        document_type: str = "json",
        header_mode: str = "full",
        answer_mode: str = "label",
    ) -> Optional[Any]:
        if document_type != "json":
            raise ValueError(f"Unsupported export document type: {document_type}")

        responses = await self._export(
            survey_id,
            response_ids,
            language,
            header_mode,
            ANSWER_MODES.get(answer_mode, answer_mode),
        )
        if not responses:
            return None
        if len(response_ids) == 1:
            return responses[0]
        return responses

    async def find_participant(self, survey_id: int, token: str) -> Optional[Participant]:
        result = await self._call_with_session(
            "get_participant_properties",
            survey_id,
            {"token": token},
            list(PARTICIPANT_FIELDS),
        )

        if not isinstance(result, dict) or "status" in result:
            # {"status": "Error: No results were found based on your attributes."}
            return None

        return Participant(**{field: result.get(field) for field in PARTICIPANT_FIELDS})

    async def close(self) -> None:
        """Release the session key and close the HTTP client."""
        try:
            if self._session_key is not None:
                await self._call("release_session_key", self._session_key)
        except HostError as e:
            logger.warning(f"Failed to release RemoteControl session key: {e}")
        finally:
            self._session_key = None
            await self.client.aclose()
        logger.debug("RemoteControlHost closed")


def _unwrap_responses(document: Any) -> List[dict]:
    """
    Flatten a LimeSurvey JSON export into a list of response mappings.

    Older releases key every response by its ID (``[{"42": {...}}]``), newer
    ones emit the mappings directly (``[{"id": 42, ...}]``).
    """
    if not isinstance(document, dict):
        return []

    responses = []
    for entry in document.get("responses", []):
        if not isinstance(entry, dict):
            continue
        if len(entry) == 1:
            (key, value), = entry.items()
            if isinstance(value, dict):
                value.setdefault("id", key)
                responses.append(value)
                continue
        responses.append(entry)
    return responses
