"""WebhookDispatcher for POSTing survey payloads to webhook URLs."""

import asyncio
import logging
import time
from typing import List, Optional, Sequence

import httpx

from ..constants import EVENT_AFTER_SURVEY_COMPLETE
from ..subscriber.metrics import MetricsCollector
from .models import DeliveryOutcome

logger = logging.getLogger(__name__)

# Response bodies are cut to this length in log lines
LOG_BODY_LIMIT = 500


class WebhookDispatcher:
    """Sends one payload to a list of webhook URLs, each independently."""

    def __init__(
        self,
        timeout: float = 30.0,
        verify_tls: bool = True,
        parallel: bool = False,
        strict_status: bool = False,
        metrics: Optional[MetricsCollector] = None,
    ):
        """
        Initialize webhook dispatcher.

        Args:
            timeout: HTTP request timeout in seconds, per URL
            verify_tls: Whether to verify the peer's TLS certificate
            parallel: POST to all URLs concurrently instead of one after another
            strict_status: Treat non-2xx responses as failed deliveries. By
                default any response that arrives counts as delivered.
            metrics: Optional metrics collector
        """
        self.timeout = timeout
        self.verify_tls = verify_tls
        self.parallel = parallel
        self.strict_status = strict_status
        self.metrics = metrics
        self.client = httpx.AsyncClient(timeout=timeout, verify=verify_tls)

        logger.info(
            f"WebhookDispatcher initialized: timeout={timeout}s, verify_tls={verify_tls}, "
            f"parallel={parallel}, strict_status={strict_status}"
        )

    async def deliver(
        self,
        urls: Sequence[str],
        json_payload: str,
        event_name: str = EVENT_AFTER_SURVEY_COMPLETE,
    ) -> List[DeliveryOutcome]:
        """
        POST the payload to every URL.

        A failing URL never prevents delivery to the others. No retries are
        made.

        Args:
            urls: Webhook URLs
            json_payload: JSON-encoded payload sent as the request body
            event_name: Triggering event, used in log lines

        Returns:
            One outcome per URL, in the order of ``urls``
        """
        if self.parallel:
            return list(
                await asyncio.gather(*(self._post(url, json_payload, event_name) for url in urls))
            )

        outcomes = []
        for url in urls:
            outcomes.append(await self._post(url, json_payload, event_name))
        return outcomes

    async def _post(self, url: str, json_payload: str, event_name: str) -> DeliveryOutcome:
        """
        Send a single HTTP POST and record its outcome.

        Args:
            url: Webhook URL to POST to
            json_payload: JSON-encoded request body
            event_name: Triggering event, used in log lines

        Returns:
            DeliveryOutcome for this URL (never raises for delivery errors)
        """
        start = time.perf_counter()
        outcome: DeliveryOutcome

        try:
            response = await self.client.post(
                url,
                content=json_payload,
                headers={"Content-Type": "application/json"},
            )
            outcome = DeliveryOutcome(
                url=url,
                succeeded=True,
                response_body=response.text,
                status_code=response.status_code,
            )
            if self.strict_status and not response.is_success:
                outcome.succeeded = False
                outcome.error = f"HTTP {response.status_code}"

        except httpx.TimeoutException:
            outcome = DeliveryOutcome(url=url, succeeded=False, error="Timeout")
        except httpx.HTTPError as e:
            outcome = DeliveryOutcome(url=url, succeeded=False, error=f"{type(e).__name__}: {e}")
        except Exception as e:
            # Malformed URLs surface here (httpx.InvalidURL is not an HTTPError)
            outcome = DeliveryOutcome(url=url, succeeded=False, error=f"{type(e).__name__}: {e}")

        outcome.elapsed_seconds = time.perf_counter() - start

        if outcome.succeeded:
            body = (outcome.response_body or "")[:LOG_BODY_LIMIT]
            logger.info(
                f"{event_name} | URL: {url} | Status: {outcome.status_code} | Response: {body}"
            )
        else:
            logger.warning(f"{event_name} | URL: {url} | Response: FAILED ({outcome.error})")
            if self.metrics:
                self.metrics.record_error("webhook", outcome.error.split(":")[0])

        if self.metrics:
            self.metrics.record_delivery(outcome.succeeded, outcome.elapsed_seconds)

        return outcome

    async def close(self) -> None:
        """Close HTTP client connection pool."""
        await self.client.aclose()
        logger.debug("WebhookDispatcher closed")
