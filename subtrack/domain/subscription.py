"""
Subscription Aggregate

The subscription entity and its billing lifecycle state machine:

    TRIAL --activate_from_trial--> ACTIVE --renew--> ACTIVE
    CANCELED is terminal (set by flows outside the renewal engine)
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta, timezone
from enum import Enum
from typing import Any, Optional, Union

from subtrack.domain.billing_cycle import BillingCycle
from subtrack.domain.money import Currency, Money
from subtrack.infrastructure.exceptions import (
    CurrencyMismatchError,
    InvalidSubscriptionNameError,
    InvalidSubscriptionStatusError,
    InvalidTrialPeriodError,
)


ONE_DAY = timedelta(days=1)


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class SubscriptionStatus(str, Enum):
    """Subscription lifecycle status."""
    ACTIVE = "ACTIVE"
    TRIAL = "TRIAL"
    CANCELED = "CANCELED"

    @classmethod
    def _missing_(cls, value: object) -> Optional["SubscriptionStatus"]:
        # Older rows name the terminal status INACTIVE
        if isinstance(value, str):
            normalized = value.strip().upper()
            if normalized in ("INACTIVE", "CANCELLED"):
                return cls.CANCELED
            for member in cls:
                if member.value == normalized:
                    return member
        return None

    @classmethod
    def parse(cls, value: Union["SubscriptionStatus", str]) -> "SubscriptionStatus":
        try:
            return cls(value)
        except ValueError:
            raise InvalidSubscriptionStatusError(value)


def days_between(start: datetime, end: datetime) -> int:
    """Whole days from ``start`` to ``end``, fractional days rounded up."""
    return math.ceil((end - start) / ONE_DAY)


def notification_window_end(today: datetime, days_before: int) -> datetime:
    """Last instant of the day ``days_before`` days after ``today``."""
    target = today + timedelta(days=days_before)
    return datetime.combine(target.date(), time.max, tzinfo=target.tzinfo)


@dataclass(eq=False)
class Subscription:
    """
    Recurring subscription owned by a user.

    ``id`` is assigned by the store; it is None until the subscription
    has been saved. Identity (not field values) defines equality.
    """
    id: Optional[Any]
    user_id: str
    name: str
    price: Money
    billing_cycle: BillingCycle
    status: SubscriptionStatus
    start_date: datetime
    next_billing_date: datetime
    currency: Optional[Currency] = None
    last_billing_date: Optional[datetime] = None
    renewal_notified_at: Optional[datetime] = None
    trial_ends_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise InvalidSubscriptionNameError()
        self.billing_cycle = BillingCycle.parse(self.billing_cycle)
        self.status = SubscriptionStatus.parse(self.status)

        if self.currency is None:
            self.currency = self.price.currency
        self.currency = Currency.parse(self.currency)
        if self.currency != self.price.currency:
            raise CurrencyMismatchError(self.price.currency.value, self.currency.value)

        if self.status is SubscriptionStatus.TRIAL and self.trial_ends_at is None:
            raise InvalidTrialPeriodError("Trial subscriptions require a trial end date")

    @classmethod
    def create(
        cls,
        user_id: str,
        name: str,
        price: Money,
        billing_cycle: Union[BillingCycle, str],
        start_date: datetime,
        trial_ends_at: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> "Subscription":
        """
        Build a new, not yet persisted subscription.

        Status is TRIAL when a trial end date is given, ACTIVE otherwise.
        The first billing date is computed by ``initialize``.

        Raises:
            InvalidSubscriptionNameError: Empty name
            InvalidTrialPeriodError: Trial ends before the start date
        """
        if trial_ends_at is not None and trial_ends_at < start_date:
            raise InvalidTrialPeriodError()

        now = now or utcnow()
        subscription = cls(
            id=None,
            user_id=user_id,
            name=name.strip() if name else name,
            price=price,
            billing_cycle=billing_cycle,
            status=SubscriptionStatus.TRIAL if trial_ends_at else SubscriptionStatus.ACTIVE,
            start_date=start_date,
            # placeholder, replaced by initialize()
            next_billing_date=start_date,
            trial_ends_at=trial_ends_at,
            created_at=now,
            updated_at=now,
        )
        subscription.initialize()
        return subscription

    # =========================================================================
    # Predicates
    # =========================================================================

    def is_active(self) -> bool:
        return self.status is SubscriptionStatus.ACTIVE

    def is_trial(self) -> bool:
        return self.status is SubscriptionStatus.TRIAL

    def is_canceled(self) -> bool:
        return self.status is SubscriptionStatus.CANCELED

    def can_activate_from_trial(self, today: datetime) -> bool:
        return (
            self.is_trial()
            and self.trial_ends_at is not None
            and self.trial_ends_at <= today
        )

    # =========================================================================
    # Transitions
    # =========================================================================

    def initialize(self) -> None:
        """Compute the first billing date for a freshly created subscription."""
        if self.is_trial() and self.trial_ends_at is not None:
            self.next_billing_date = self.billing_cycle.add_to(self.trial_ends_at)
            return

        self.status = SubscriptionStatus.ACTIVE
        self.next_billing_date = self.billing_cycle.add_to(self.start_date)

    def activate_from_trial(self, today: datetime) -> bool:
        """
        End the trial and start the first paid cycle.

        Billing starts one cycle after the trial end, not after ``today``.
        Returns False (and changes nothing) when the trial is not over.
        """
        if not self.can_activate_from_trial(today):
            return False

        self.status = SubscriptionStatus.ACTIVE
        self.next_billing_date = self.billing_cycle.add_to(self.trial_ends_at)
        self.trial_ends_at = None
        self.renewal_notified_at = None
        self.updated_at = today
        return True

    def renew(self, now: Optional[datetime] = None) -> bool:
        """
        Advance an active subscription by one billing cycle.

        The new date chains from the previous due date so a late run
        does not shift the schedule. Returns False for non-active
        subscriptions.
        """
        if not self.is_active():
            return False

        self.last_billing_date = self.next_billing_date
        self.next_billing_date = self.billing_cycle.add_to(self.next_billing_date)
        self.renewal_notified_at = None
        self.updated_at = now or utcnow()
        return True

    # =========================================================================
    # Notifications
    # =========================================================================

    def days_until_renewal(self, today: datetime) -> int:
        return days_between(today, self.next_billing_date)

    def should_notify(self, days_before: int, today: datetime) -> bool:
        """True when a reminder is due and none was sent this cycle."""
        if self.is_canceled():
            return False
        if self.renewal_notified_at is not None:
            return False

        days_left = self.days_until_renewal(today)
        return 0 <= days_left <= days_before

    def mark_notified(self, today: datetime) -> None:
        self.renewal_notified_at = today

    def __repr__(self) -> str:
        return (
            f"<Subscription id={self.id} user_id={self.user_id} "
            f"status={self.status.value} next_billing_date={self.next_billing_date.isoformat()}>"
        )
