"""Survey host notification endpoints."""

import logging

from fastapi import APIRouter, Depends

from ...subscriber.event_handler import SurveyCompletionHandler
from ...webhook.models import DispatchResult
from ..dependencies import get_handler
from ..schemas import SurveyCompletedRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/events/survey-completed",
    response_model=DispatchResult,
    summary="Notify that a survey response was completed",
)
async def survey_completed(
    request: SurveyCompletedRequest,
    handler: SurveyCompletionHandler = Depends(get_handler),
) -> DispatchResult:
    """
    Send the completed response to the survey's webhooks.

    The call returns once every webhook has been attempted. Delivery
    failures are reported in the result, never as an HTTP error, so the
    host can always finish rendering the respondent's completion page.
    When debug mode is on, `debug_html` carries a report to inject into
    that page.
    """
    logger.debug(
        f"Survey completion notification: survey={request.survey_id}, "
        f"response={request.response_id}"
    )
    return await handler.handle_survey_completed(request.survey_id, request.response_id)
