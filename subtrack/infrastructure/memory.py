"""
In-Memory Adapters

Dict-backed SubscriptionStore and UserDirectory with the same selection
and batch semantics as the SQL repositories. Used by tests and local runs.
"""

import copy
import itertools
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from subtrack.domain.interfaces import SubscriptionStore, UserDirectory
from subtrack.domain.subscription import (
    Subscription,
    SubscriptionStatus,
    notification_window_end,
    utcnow,
)
from subtrack.domain.user import User
from subtrack.infrastructure.exceptions import BatchUpdateError


class InMemorySubscriptionStore(SubscriptionStore):
    """
    Subscription store keeping snapshots in a dict.

    Callers always receive copies, so changes only become visible through
    ``update_many``.
    """

    def __init__(self, subscriptions: Optional[Iterable[Subscription]] = None):
        self._rows: Dict[int, Subscription] = {}
        self._ids = itertools.count(1)
        for subscription in subscriptions or []:
            self.save(subscription)

    def save(self, subscription: Subscription) -> Subscription:
        if subscription.id is None:
            subscription.id = next(self._ids)
        self._rows[subscription.id] = copy.deepcopy(subscription)
        return subscription

    def get(self, subscription_id: int) -> Optional[Subscription]:
        row = self._rows.get(subscription_id)
        return copy.deepcopy(row) if row is not None else None

    def all(self) -> List[Subscription]:
        return [copy.deepcopy(row) for row in self._rows.values()]

    async def find_due_for_renewal(self, reference_date: datetime) -> List[Subscription]:
        due = []
        for row in self._rows.values():
            if row.status is SubscriptionStatus.ACTIVE and row.next_billing_date <= reference_date:
                due.append(copy.deepcopy(row))
            elif (
                row.status is SubscriptionStatus.TRIAL
                and row.trial_ends_at is not None
                and row.trial_ends_at <= reference_date
            ):
                due.append(copy.deepcopy(row))
        return due

    async def find_subscriptions_to_notify(
        self,
        days_before: int,
        today: Optional[datetime] = None,
    ) -> List[Subscription]:
        window_end = notification_window_end(today or utcnow(), days_before)
        return [
            copy.deepcopy(row)
            for row in self._rows.values()
            if row.status is SubscriptionStatus.ACTIVE
            and row.renewal_notified_at is None
            and row.next_billing_date <= window_end
        ]

    async def update_many(self, subscriptions: Sequence[Subscription]) -> None:
        # Validate the whole batch before touching any row
        for subscription in subscriptions:
            if subscription.id not in self._rows:
                raise BatchUpdateError(
                    f"Failed to update subscription {subscription.id}",
                    subscription_id=subscription.id,
                )
        for subscription in subscriptions:
            self._rows[subscription.id] = copy.deepcopy(subscription)


class InMemoryUserDirectory(UserDirectory):
    """User directory backed by a dict keyed by user id."""

    def __init__(self, users: Optional[Iterable[User]] = None):
        self._users: Dict[str, User] = {user.id: user for user in users or []}

    def add(self, user: User) -> None:
        self._users[user.id] = user

    async def find_by_id(self, user_id: str) -> Optional[User]:
        return self._users.get(user_id)
