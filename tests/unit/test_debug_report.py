"""Unit tests for the HTML debug report."""

from survey_webhook.webhook.debug import render_debug_report
from survey_webhook.webhook.models import DeliveryOutcome
from survey_webhook.webhook.payload import build_payload

URLS = ["https://a.example/hook", "https://b.example/hook"]


def make_payload(response=None):
    return build_payload(
        "afterSurveyComplete", 100, 42, response or {"Q1": "A1"}, None,
        "2024-05-01 10:00:00", None, None, "tok",
    )


class TestRenderDebugReport:
    """Test render_debug_report."""

    def test_contains_event_urls_and_bodies(self):
        """Test the report lists the event, URL count and each response."""
        outcomes = [
            DeliveryOutcome(url=URLS[0], succeeded=True, response_body="ok-a"),
            DeliveryOutcome(url=URLS[1], succeeded=True, response_body="ok-b"),
        ]
        html = render_debug_report(URLS, make_payload(), outcomes, 0.5, "afterSurveyComplete")

        assert html.startswith("<pre>")
        assert html.endswith("</pre>")
        assert "Event: afterSurveyComplete" in html
        assert "Webhook URLs (2):" in html
        assert f"&bull; {URLS[0]}" in html
        assert "Response: ok-a" in html
        assert "Response: ok-b" in html

    def test_failed_marker(self):
        """Test failed deliveries show FAILED instead of a body."""
        outcomes = [
            DeliveryOutcome(url=URLS[0], succeeded=False, error="Timeout"),
            DeliveryOutcome(url=URLS[1], succeeded=True, response_body=""),
        ]
        html = render_debug_report(URLS, make_payload(), outcomes, 0.5, "afterSurveyComplete")

        assert html.count("Response: FAILED") == 1

    def test_payload_pretty_printed(self):
        """Test the payload is shown as indented JSON."""
        html = render_debug_report([], make_payload(), [], 0.1, "afterSurveyComplete")

        assert '    &quot;survey&quot;: 100' in html
        assert '&quot;api_token&quot;: &quot;tok&quot;' in html

    def test_values_escaped(self):
        """Test respondent text and response bodies cannot inject markup."""
        payload = make_payload({"Q1": "<script>alert(1)</script>"})
        outcomes = [DeliveryOutcome(url=URLS[0], succeeded=True, response_body="<b>hi</b>")]
        html = render_debug_report(URLS[:1], payload, outcomes, 0.1, "<evt>")

        assert "<script>" not in html
        assert "&lt;script&gt;" in html
        assert "<b>hi</b>" not in html
        assert "&lt;b&gt;hi&lt;/b&gt;" in html
        assert "Event: &lt;evt&gt;" in html

    def test_execution_time_rounded(self):
        """Test elapsed time is rounded to four decimals."""
        html = render_debug_report([], make_payload(), [], 0.123456789, "afterSurveyComplete")
        assert "Execution time: 0.1235s" in html
