"""
Scheduled renewal services.
"""

from subtrack.services.notify_subscriptions import (
    NotificationRunResult,
    NotifySubscriptionsService,
)
from subtrack.services.process_renewals import (
    ProcessRenewalsService,
    RenewalRunResult,
)


__all__ = [
    "NotificationRunResult",
    "NotifySubscriptionsService",
    "ProcessRenewalsService",
    "RenewalRunResult",
]
