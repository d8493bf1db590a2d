"""Webhook module for sending survey responses to external URLs."""

from .debug import render_debug_report
from .dispatcher import WebhookDispatcher
from .models import DeliveryOutcome, DispatchResult, SurveyWebhookConfig, WebhookPayload
from .payload import build_payload, normalize_submit_date, serialize_payload
from .resolver import (
    ConfigurationResolver,
    is_survey_enabled,
    parse_survey_ids,
    parse_urls,
)

__all__ = [
    "ConfigurationResolver",
    "DeliveryOutcome",
    "DispatchResult",
    "SurveyWebhookConfig",
    "WebhookDispatcher",
    "WebhookPayload",
    "build_payload",
    "is_survey_enabled",
    "normalize_submit_date",
    "parse_survey_ids",
    "parse_urls",
    "render_debug_report",
    "serialize_payload",
]
