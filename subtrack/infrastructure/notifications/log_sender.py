"""
Logging Sender

Development fallback used when no email provider is configured: the
reminder is written to the log instead of being delivered.
"""

import logging
from datetime import datetime
from typing import List, Optional

from subtrack.domain.interfaces import NotificationSender, SendResult
from subtrack.domain.notification_formatter import (
    FormattedRenewalNotification,
    RenewalNotificationFormatter,
)


logger = logging.getLogger(__name__)


class LoggingNotificationSender(NotificationSender):
    """Writes renewal reminders to the application log."""

    def __init__(self, formatter: Optional[RenewalNotificationFormatter] = None):
        self._formatter = formatter or RenewalNotificationFormatter()

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
        logger.info(
            f"[EMAIL DISABLED] To {email}: {notification.subject} "
            f"({notification.formatted_date}) {notification.subscriptions_list}"
        )
        return SendResult()
