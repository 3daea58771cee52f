"""
Renewal Engine Interfaces

Contracts for the collaborators the renewal and notification services
depend on. SQL-backed and in-memory adapters implement the same contracts.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence, TYPE_CHECKING

from subtrack.domain.subscription import Subscription
from subtrack.domain.user import User

if TYPE_CHECKING:
    from subtrack.domain.notification_formatter import FormattedRenewalNotification


@dataclass
class SendResult:
    """
    Outcome of a delivery attempt.

    Senders report delivery problems here instead of raising.
    """
    message_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SubscriptionStore(ABC):
    """Query and persist subscriptions."""

    @abstractmethod
    async def find_due_for_renewal(self, reference_date: datetime) -> List[Subscription]:
        """
        ACTIVE subscriptions with next_billing_date <= reference_date and
        TRIAL subscriptions with trial_ends_at <= reference_date.
        """
        pass

    @abstractmethod
    async def find_subscriptions_to_notify(
        self,
        days_before: int,
        today: Optional[datetime] = None,
    ) -> List[Subscription]:
        """
        Coarse candidate set for renewal reminders.

        ACTIVE, not yet notified, due before the end of day
        ``today + days_before``.
        """
        pass

    @abstractmethod
    async def update_many(self, subscriptions: Sequence[Subscription]) -> None:
        """
        Persist every subscription in one atomic batch.

        Raises:
            BatchUpdateError: If any member cannot be written; nothing is persisted
        """
        pass


class UserDirectory(ABC):
    """Resolve subscription owners."""

    @abstractmethod
    async def find_by_id(self, user_id: str) -> Optional[User]:
        pass


class NotificationSender(ABC):
    """Deliver renewal reminders to a single user."""

    @abstractmethod
    async def notify_renewal(
        self,
        email: str,
        subscription_names: List[str],
        next_billing_date: datetime,
        *,
        notification: Optional["FormattedRenewalNotification"] = None,
    ) -> SendResult:
        """
        Send one reminder covering ``subscription_names``.

        Delivery failures are returned in ``SendResult.error``; only
        transport-level failures raise.
        """
        pass
