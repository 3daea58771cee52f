"""
Billing Cycle Value Object

WEEKLY / MONTHLY / YEARLY and the rule for advancing a billing date.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Union

from subtrack.infrastructure.exceptions import InvalidBillingCycleError


def _shift_months(moment: datetime, months: int) -> datetime:
    """
    Move a datetime by whole calendar months.

    A day past the end of the target month rolls over into the following
    month (Jan 31 + 1 month -> Mar 2/3), it is never clamped.
    """
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    first_of_month = moment.replace(year=year, month=month, day=1)
    return first_of_month + timedelta(days=moment.day - 1)


class BillingCycle(str, Enum):
    """How often a subscription renews."""
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"

    @classmethod
    def parse(cls, value: Union["BillingCycle", str]) -> "BillingCycle":
        """Parse a stored/user supplied literal (case-insensitive)."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise InvalidBillingCycleError(value)

    def add_to(self, moment: datetime) -> datetime:
        """Return the billing date one cycle after ``moment``."""
        if self is BillingCycle.WEEKLY:
            return moment + timedelta(days=7)
        if self is BillingCycle.MONTHLY:
            return _shift_months(moment, 1)
        return _shift_months(moment, 12)
