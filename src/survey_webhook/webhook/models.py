"""Pydantic models for webhook payload and delivery structures."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from ..host.interface import Participant


class WebhookPayload(BaseModel):
    """Document POSTed to every webhook URL.

    Field names are part of the wire contract; optional fields are always
    present and serialized as null when absent.
    """

    api_token: Optional[str] = None
    survey: int
    event: str
    respondId: int
    response: Dict[Any, Any]
    response_pretty: Optional[Any] = None
    submitDate: str
    token: Optional[str] = None
    participant: Optional[Participant] = None


class SurveyWebhookConfig(BaseModel):
    """Effective webhook configuration of one survey."""

    enabled: bool = False
    urls: List[str] = []
    auth_token: Optional[str] = None


class DeliveryOutcome(BaseModel):
    """Result of posting the payload to a single URL."""

    url: str
    succeeded: bool
    response_body: Optional[str] = None
    status_code: Optional[int] = None
    error: Optional[str] = None
    elapsed_seconds: float = 0.0


class DispatchResult(BaseModel):
    """What happened to one survey completion notification."""

    survey_id: int
    response_id: int
    event: str
    status: str  # disabled/no_urls/response_unavailable/delivered/error
    outcomes: List[DeliveryOutcome] = []
    elapsed_seconds: float = 0.0
    debug_html: Optional[str] = None
