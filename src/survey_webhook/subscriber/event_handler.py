"""Event handler turning survey completion notifications into webhook deliveries."""

import logging
import time
from typing import Optional

from ..constants import DEFAULT_LANGUAGE, EVENT_AFTER_SURVEY_COMPLETE
from ..host.interface import (
    ExportRenderer,
    HostError,
    Participant,
    ParticipantDirectory,
    ResponseStore,
)
from ..utils.logging import LogContext
from ..webhook.debug import render_debug_report
from ..webhook.dispatcher import WebhookDispatcher
from ..webhook.models import DispatchResult
from ..webhook.payload import build_payload, normalize_submit_date, serialize_payload
from ..webhook.resolver import ConfigurationResolver
from .metrics import MetricsCollector

logger = logging.getLogger(__name__)

# Dispatch statuses
STATUS_DISABLED = "disabled"
STATUS_NO_URLS = "no_urls"
STATUS_RESPONSE_UNAVAILABLE = "response_unavailable"
STATUS_DELIVERED = "delivered"
STATUS_ERROR = "error"


class SurveyCompletionHandler:
    """Handles survey completion notifications from the survey host.

    Each notification is processed on the caller's task: resolve
    configuration, gather response data, build the payload, deliver it to
    every URL and optionally render a debug report. Nothing is kept between
    notifications, and no exception escapes to the caller: a broken webhook
    must never affect the respondent's completion page.
    """

    def __init__(
        self,
        resolver: ConfigurationResolver,
        responses: ResponseStore,
        participants: ParticipantDirectory,
        exporter: ExportRenderer,
        dispatcher: WebhookDispatcher,
        default_language: str = DEFAULT_LANGUAGE,
        metrics: Optional[MetricsCollector] = None,
    ):
        """Initialize event handler."""
        self.resolver = resolver
        self.responses = responses
        self.participants = participants
        self.exporter = exporter
        self.dispatcher = dispatcher
        self.default_language = default_language
        self.metrics = metrics
        self.event_count = 0

    async def handle_survey_completed(
        self,
        survey_id: int,
        response_id: int,
        event_name: str = EVENT_AFTER_SURVEY_COMPLETE,
    ) -> DispatchResult:
        """
        Handle a survey completion notification.

        Args:
            survey_id: Survey that was completed
            response_id: The finalized response
            event_name: Name of the host notification

        Returns:
            DispatchResult describing what was done
        """
        self.event_count += 1
        start = time.perf_counter()
        result = DispatchResult(
            survey_id=survey_id,
            response_id=response_id,
            event=event_name,
            status=STATUS_ERROR,
        )

        with LogContext(survey_id=survey_id, response_id=response_id, event=event_name):
            try:
                await self._dispatch(result, start)
            except Exception as e:
                logger.error(
                    f"Error handling {event_name} for survey {survey_id}, response {response_id}: {e}",
                    exc_info=True,
                )
                result.status = STATUS_ERROR
                if self.metrics:
                    self.metrics.record_error("dispatch", type(e).__name__)

        if not result.elapsed_seconds:
            result.elapsed_seconds = time.perf_counter() - start

        if self.metrics:
            self.metrics.record_dispatch(result.status, result.elapsed_seconds)

        return result

    async def _dispatch(self, result: DispatchResult, start: float) -> None:
        survey_id = result.survey_id
        response_id = result.response_id
        event_name = result.event

        if not self.resolver.is_enabled(survey_id):
            logger.debug(f"Webhook disabled for survey {survey_id}")
            result.status = STATUS_DISABLED
            return

        urls = self.resolver.resolve_urls(survey_id)
        if not urls:
            logger.info(f"No webhook URL configured for survey {survey_id}")
            result.status = STATUS_NO_URLS
            return

        try:
            response = await self.responses.get_response(survey_id, response_id)
        except HostError as e:
            logger.error(f"Could not fetch response {response_id} of survey {survey_id}: {e}")
            response = None
        if response is None:
            logger.error(f"Response {response_id} of survey {survey_id} unavailable, nothing sent")
            result.status = STATUS_RESPONSE_UNAVAILABLE
            return

        submit_date = normalize_submit_date(response.get("submitdate"))
        token = response.get("token")
        if token is not None:
            token = str(token)
        participant = await self._find_participant(survey_id, token) if token else None

        language = response.get("startlanguage") or self.default_language
        response_pretty = await self._export_pretty(survey_id, response_id, language)

        auth_token = self.resolver.resolve_auth_token(survey_id)

        payload = build_payload(
            event_name,
            int(survey_id),
            int(response_id),
            response,
            response_pretty,
            submit_date,
            token,
            participant,
            auth_token,
        )

        result.outcomes = await self.dispatcher.deliver(
            urls, serialize_payload(payload), event_name=event_name
        )
        result.status = STATUS_DELIVERED
        result.elapsed_seconds = time.perf_counter() - start

        delivered = sum(1 for outcome in result.outcomes if outcome.succeeded)
        logger.info(
            f"{event_name} for survey {survey_id}, response {response_id}: "
            f"{delivered}/{len(urls)} webhook(s) delivered in {result.elapsed_seconds:.3f}s"
        )

        if self.resolver.is_debug_enabled():
            logger.debug(f"Rendering webhook debug report for {event_name}")
            result.debug_html = render_debug_report(
                urls, payload, result.outcomes, result.elapsed_seconds, event_name
            )

    async def _find_participant(self, survey_id: int, token: str) -> Optional[Participant]:
        """Look up the participant; a failed lookup is treated as no participant."""
        try:
            participant = await self.participants.find_participant(survey_id, token)
        except HostError as e:
            logger.warning(f"Participant lookup failed for survey {survey_id}: {e}")
            return None

        if participant is None:
            logger.debug(f"No participant found for token in survey {survey_id}")
        return participant

    async def _export_pretty(self, survey_id: int, response_id: int, language: str):
        """Export the response with full question texts and answer labels."""
        try:
            return await self.exporter.export_response(
                survey_id,
                [response_id],
                language,
                document_type="json",
                header_mode="full",
                answer_mode="label",
            )
        except HostError as e:
            logger.warning(
                f"Readable export of response {response_id} (survey {survey_id}) failed: {e}"
            )
            return None
