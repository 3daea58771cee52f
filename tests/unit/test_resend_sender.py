"""
Unit tests for ResendNotificationSender using httpx.MockTransport.
"""

import json

import httpx
import pytest

from subtrack.domain.notification_formatter import RenewalNotificationFormatter
from subtrack.infrastructure.exceptions import ConfigurationError, NotificationError
from subtrack.infrastructure.notifications import (
    LoggingNotificationSender,
    ResendNotificationSender,
)
from tests.factories import utc


TODAY = utc(2024, 2, 15)
DUE = utc(2024, 2, 22)
API_URL = "https://api.resend.test/emails"


def make_sender(handler, template_id=None):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ResendNotificationSender(
        api_key="re_test",
        from_email="SubTrack <no-reply@example.com>",
        template_id=template_id,
        api_url=API_URL,
        http_client=client,
    )


def notification_for(names):
    return RenewalNotificationFormatter().format(names, DUE, TODAY)


class TestResendNotificationSender:

    @pytest.mark.asyncio
    async def test_sends_template_variables(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["auth"] = request.headers["Authorization"]
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={"id": "msg_123"})

        sender = make_sender(handler, template_id="renewal-reminder")

        result = await sender.notify_renewal(
            "user@example.com",
            ["Netflix", "Spotify"],
            DUE,
            notification=notification_for(["Netflix", "Spotify"]),
        )

        assert result.ok
        assert result.message_id == "msg_123"
        assert captured["url"] == API_URL
        assert captured["auth"] == "Bearer re_test"
        body = captured["body"]
        assert body["to"] == ["user@example.com"]
        assert body["subject"] == "Reminder: 2 subscriptions renew in 7 days"
        assert body["template"] == {
            "id": "renewal-reminder",
            "variables": {
                "RENEWAL_MESSAGE": "renew in 7 days",
                "SUBSCRIPTIONS_LIST": "1. Netflix<br>2. Spotify",
                "FORMATTED_DATE": "22/02/2024",
            },
        }
        assert "html" not in body

    @pytest.mark.asyncio
    async def test_inline_html_without_template(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={"id": "msg_456"})

        sender = make_sender(handler)

        await sender.notify_renewal(
            "user@example.com",
            ["Netflix"],
            DUE,
            notification=notification_for(["Netflix"]),
        )

        assert "template" not in captured["body"]
        assert "1. Netflix" in captured["body"]["html"]
        assert "22/02/2024" in captured["body"]["html"]

    @pytest.mark.asyncio
    async def test_provider_rejection_is_returned(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(422, json={"name": "validation_error", "message": "Invalid `to` field"})

        sender = make_sender(handler)

        result = await sender.notify_renewal(
            "not-an-email", ["Netflix"], DUE, notification=notification_for(["Netflix"])
        )

        assert not result.ok
        assert result.error == "Invalid `to` field"

    @pytest.mark.asyncio
    async def test_non_json_error_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="Bad Gateway")

        sender = make_sender(handler)

        result = await sender.notify_renewal(
            "user@example.com", ["Netflix"], DUE, notification=notification_for(["Netflix"])
        )

        assert result.error == "HTTP 502"

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        sender = make_sender(handler)

        with pytest.raises(NotificationError) as exc_info:
            await sender.notify_renewal(
                "user@example.com", ["Netflix"], DUE, notification=notification_for(["Netflix"])
            )

        assert exc_info.value.details["provider"] == "resend"

    def test_requires_api_key(self, monkeypatch):
        from subtrack.config.settings import get_settings

        monkeypatch.setattr(get_settings(), "resend_api_key", None)

        with pytest.raises(ConfigurationError):
            ResendNotificationSender()


class TestLoggingNotificationSender:

    @pytest.mark.asyncio
    async def test_logs_and_succeeds(self, caplog):
        sender = LoggingNotificationSender()

        with caplog.at_level("INFO"):
            result = await sender.notify_renewal("user@example.com", ["Netflix"], DUE)

        assert result.ok
        assert "user@example.com" in caplog.text
