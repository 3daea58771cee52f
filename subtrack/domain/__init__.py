"""
Subscription billing domain: value objects, the subscription aggregate,
collaborator interfaces and reminder formatting.
"""

from subtrack.domain.billing_cycle import BillingCycle
from subtrack.domain.interfaces import (
    NotificationSender,
    SendResult,
    SubscriptionStore,
    UserDirectory,
)
from subtrack.domain.money import Currency, Money
from subtrack.domain.notification_formatter import (
    FormattedRenewalNotification,
    RenewalNotificationFormatter,
)
from subtrack.domain.subscription import Subscription, SubscriptionStatus
from subtrack.domain.user import User


__all__ = [
    "BillingCycle",
    "Currency",
    "FormattedRenewalNotification",
    "Money",
    "NotificationSender",
    "RenewalNotificationFormatter",
    "SendResult",
    "Subscription",
    "SubscriptionStatus",
    "SubscriptionStore",
    "User",
    "UserDirectory",
]
