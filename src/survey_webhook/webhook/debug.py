"""HTML debug report shown to administrators after a dispatch."""

from html import escape
from typing import Any, Mapping, Sequence

from .models import DeliveryOutcome
from .payload import serialize_payload

SEPARATOR = "-----------------------------"


def render_debug_report(
    urls: Sequence[str],
    payload: Mapping[str, Any],
    outcomes: Sequence[DeliveryOutcome],
    elapsed_seconds: float,
    event_name: str,
) -> str:
    """
    Render the payload, targets and per-URL responses as an HTML block.

    The payload carries respondent-entered text, so every interpolated value
    is HTML-escaped.

    Args:
        urls: Webhook URLs the payload was sent to
        payload: The webhook payload
        outcomes: Delivery outcomes, one per URL
        elapsed_seconds: Time from notification to last delivery
        event_name: Triggering event

    Returns:
        A <pre> block ready to be injected into the host page
    """
    parts = [
        "<pre><br><br>---------------- WEBHOOK DEBUG ----------------<br><br>",
        f"Event: {escape(event_name)}<br><br>",
        f"Payload:<br>{escape(serialize_payload(payload, pretty=True))}",
        f"<br><br>{SEPARATOR}<br><br>",
        f"Webhook URLs ({len(urls)}):<br>",
    ]

    for outcome in outcomes:
        response = (outcome.response_body or "") if outcome.succeeded else "FAILED"
        parts.append(f"<br>&bull; {escape(outcome.url)}<br>")
        parts.append(f"  Response: {escape(response)}<br>")

    parts.append(f"<br>{SEPARATOR}<br>")
    parts.append(f"Execution time: {round(elapsed_seconds, 4)}s")
    parts.append("</pre>")

    return "".join(parts)
