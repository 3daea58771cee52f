"""
Resend Email Sender

NotificationSender that delivers renewal reminders through the Resend
HTTP API. Provider-side rejections are reported in the SendResult; only
network failures raise.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx

from subtrack.config.settings import get_settings
from subtrack.domain.interfaces import NotificationSender, SendResult
from subtrack.domain.notification_formatter import (
    FormattedRenewalNotification,
    RenewalNotificationFormatter,
)
from subtrack.infrastructure.exceptions import ConfigurationError, NotificationError


logger = logging.getLogger(__name__)


class ResendNotificationSender(NotificationSender):
    """
    Renewal reminders via Resend.

    When a template ID is configured the formatted strings are passed as
    template variables (RENEWAL_MESSAGE, SUBSCRIPTIONS_LIST,
    FORMATTED_DATE); otherwise a small HTML body is rendered inline.

    Args:
        api_key: Resend API key (defaults to settings)
        from_email: Sender address (defaults to settings)
        template_id: Optional Resend template ID
        formatter: Used when the caller did not pre-format the reminder
        http_client: Shared client; a short-lived one is created per call otherwise
    """

    PROVIDER = "resend"

    def __init__(
        self,
        api_key: Optional[str] = None,
        from_email: Optional[str] = None,
        template_id: Optional[str] = None,
        api_url: Optional[str] = None,
        formatter: Optional[RenewalNotificationFormatter] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        settings = get_settings()
        self._api_key = api_key or settings.resend_api_key
        if not self._api_key:
            raise ConfigurationError(
                "Resend API key is not configured",
                missing_keys=["RESEND_API_KEY"],
            )
        self._from_email = from_email or settings.resend_from_email
        self._template_id = template_id or settings.resend_renewal_template_id
        self._api_url = api_url or settings.resend_api_url
        self._timeout = settings.http_timeout_seconds
        self._formatter = formatter or RenewalNotificationFormatter(settings.notification_locale)
        self._http_client = http_client

    async def notify_renewal(
        self,
        email: str,
        subscription_names: List[str],
        next_billing_date: datetime,
        *,
        notification: Optional[FormattedRenewalNotification] = None,
    ) -> SendResult:
        notification = notification or self._formatter.format(
            subscription_names, next_billing_date
        )
        payload = self._build_payload(email, notification)

        try:
            response = await self._post(payload)
        except httpx.HTTPError as e:
            logger.error(f"[RESEND] Transport error sending to {email}: {e}")
            raise NotificationError(
                "Failed to reach email provider",
                provider=self.PROVIDER,
                original_error=e,
            )

        if response.is_error:
            error = self._error_message(response)
            logger.warning(f"[RESEND] HTTP {response.status_code} for {email}: {error}")
            return SendResult(error=error)

        message_id = response.json().get("id")
        logger.info(f"[RESEND] Renewal reminder sent to {email} (id={message_id})")
        return SendResult(message_id=message_id)

    async def _post(self, payload: Dict[str, Any]) -> httpx.Response:
        headers = {"Authorization": f"Bearer {self._api_key}"}
        if self._http_client is not None:
            return await self._http_client.post(self._api_url, json=payload, headers=headers)

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.post(self._api_url, json=payload, headers=headers)

    def _build_payload(
        self,
        email: str,
        notification: FormattedRenewalNotification,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "from": self._from_email,
            "to": [email],
            "subject": notification.subject,
        }
        if self._template_id:
            payload["template"] = {
                "id": self._template_id,
                "variables": {
                    "RENEWAL_MESSAGE": notification.renewal_message,
                    "SUBSCRIPTIONS_LIST": notification.subscriptions_list,
                    "FORMATTED_DATE": notification.formatted_date,
                },
            }
        else:
            payload["html"] = (
                f"<p>{notification.renewal_message} ({notification.formatted_date}):</p>"
                f"<p>{notification.subscriptions_list}</p>"
            )
        return payload

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return f"HTTP {response.status_code}"
        return body.get("message") or body.get("name") or f"HTTP {response.status_code}"
