"""Construction and serialization of the webhook payload."""

import json
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping, Optional, Union

from ..constants import LEGACY_SUBMIT_DATE, SUBMIT_DATE_FORMAT
from ..host.interface import Participant
from .models import WebhookPayload


def normalize_submit_date(submit_date: Optional[str]) -> str:
    """
    Replace a missing or placeholder submit date with the current time.

    Args:
        submit_date: Submit date as stored by the survey host

    Returns:
        The date unchanged, or now as YYYY-MM-DD HH:MM:SS when it is empty or
        the host's 1980-01-01 00:00:00 placeholder
    """
    if not submit_date or submit_date == LEGACY_SUBMIT_DATE:
        return datetime.now().strftime(SUBMIT_DATE_FORMAT)
    return submit_date


def build_payload(
    event_name: str,
    survey_id: int,
    response_id: int,
    response: Mapping[str, Any],
    response_pretty: Optional[Any],
    submit_date: str,
    token: Optional[str],
    participant: Optional[Union[Participant, Mapping[str, Any]]],
    auth_token: Optional[str],
) -> dict:
    """
    Assemble the webhook document.

    Every key is always present; absent values stay None so they are
    serialized as explicit nulls. The returned mapping is a fresh copy, the
    inputs are left untouched.
    """
    return WebhookPayload(
        api_token=auth_token,
        survey=survey_id,
        event=event_name,
        respondId=response_id,
        response=response,
        response_pretty=response_pretty,
        submitDate=submit_date,
        token=token,
        participant=participant,
    ).model_dump()


def _json_default(value: Any) -> Any:
    """Encode host values the json module does not know."""
    if isinstance(value, (datetime, date)):
        return value.isoformat(sep=" ") if isinstance(value, datetime) else value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def serialize_payload(payload: Mapping[str, Any], pretty: bool = False) -> str:
    """Encode a payload as JSON."""
    return json.dumps(
        payload,
        default=_json_default,
        ensure_ascii=False,
        indent=4 if pretty else None,
    )
