"""
Notify Subscriptions Service

Scheduled job that sends one renewal reminder per user for subscriptions
entering the notification window, then marks them notified so the same
cycle is never announced twice.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from subtrack.domain.interfaces import (
    NotificationSender,
    SubscriptionStore,
    UserDirectory,
)
from subtrack.domain.notification_formatter import RenewalNotificationFormatter
from subtrack.domain.subscription import Subscription, utcnow


DEFAULT_DAYS_BEFORE = 10


@dataclass
class NotificationRunResult:
    """Counts reported by one notification run."""
    today: datetime
    days_before: int
    notifications_sent: int = 0
    users_skipped: int = 0
    subscriptions_notified: int = 0
    failed_sends: int = 0


def group_by_user(subscriptions: List[Subscription]) -> Dict[str, List[Subscription]]:
    """Group subscriptions by owner, keeping first-seen order."""
    groups: Dict[str, List[Subscription]] = {}
    for subscription in subscriptions:
        groups.setdefault(subscription.user_id, []).append(subscription)
    return groups


class NotifySubscriptionsService:
    """
    Sends grouped renewal reminders.

    Subscriptions are marked notified after the send attempt whether or not
    delivery succeeded; a failing template must not trigger a reminder on
    every run.

    Args:
        subscription_store: Source and sink of subscriptions
        user_directory: Resolves owners to email addresses
        notification_sender: Delivers the reminder
        formatter: Reminder wording (defaults to English)
        logger: Logger for run diagnostics
    """

    def __init__(
        self,
        subscription_store: SubscriptionStore,
        user_directory: UserDirectory,
        notification_sender: NotificationSender,
        formatter: Optional[RenewalNotificationFormatter] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.subscription_store = subscription_store
        self.user_directory = user_directory
        self.notification_sender = notification_sender
        self.formatter = formatter or RenewalNotificationFormatter()
        self.logger = logger or logging.getLogger(__name__)

    async def run(
        self,
        days_before: int = DEFAULT_DAYS_BEFORE,
        today: Optional[datetime] = None,
    ) -> NotificationRunResult:
        today = today or utcnow()
        result = NotificationRunResult(today=today, days_before=days_before)

        self.logger.info(
            f"Starting subscription notifications (days_before={days_before}, date={today.isoformat()})"
        )

        try:
            candidates = await self.subscription_store.find_subscriptions_to_notify(
                days_before, today
            )
        except Exception as e:
            self.logger.error(f"Error fetching subscriptions to notify: {e}")
            raise

        eligible = [s for s in candidates if s.should_notify(days_before, today)]
        self.logger.debug(
            f"Filtered subscriptions: found={len(candidates)} eligible={len(eligible)}"
        )

        if not eligible:
            self.logger.info("No subscriptions eligible for notification")
            return result

        groups = group_by_user(eligible)
        updated: List[Subscription] = []

        for user_id, user_subscriptions in groups.items():
            user = await self.user_directory.find_by_id(user_id)
            if user is None:
                self.logger.warning(
                    f"User {user_id} not found, skipping {len(user_subscriptions)} subscription(s)"
                )
                result.users_skipped += 1
                continue

            names = [s.name for s in user_subscriptions]
            # Assumes one billing date per user group; the first one is shown
            next_billing_date = user_subscriptions[0].next_billing_date
            notification = self.formatter.format(names, next_billing_date, today)

            # A transport-level NotificationError propagates here; groups already
            # sent in this run stay unmarked and are re-sent by the next run.
            send_result = await self.notification_sender.notify_renewal(
                user.email,
                names,
                next_billing_date,
                notification=notification,
            )
            result.notifications_sent += 1
            if not send_result.ok:
                result.failed_sends += 1
                self.logger.error(
                    f"Renewal reminder to user {user_id} failed: {send_result.error}"
                )

            for subscription in user_subscriptions:
                subscription.mark_notified(today)
                updated.append(subscription)

        if updated:
            try:
                await self.subscription_store.update_many(updated)
            except Exception as e:
                self.logger.error(f"Error saving notified subscriptions: {e}")
                raise

        result.subscriptions_notified = len(updated)
        self.logger.info(
            f"Subscription notifications processed: sent={result.notifications_sent} "
            f"users_skipped={result.users_skipped} failed={result.failed_sends}"
        )
        return result
