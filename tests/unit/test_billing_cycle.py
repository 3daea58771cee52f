"""
Unit tests for BillingCycle date arithmetic.

MONTHLY/YEARLY roll over past the end of short months instead of clamping.
"""

import pytest
from datetime import timedelta, timezone

from subtrack.domain.billing_cycle import BillingCycle
from subtrack.infrastructure.exceptions import InvalidBillingCycleError
from tests.factories import utc


class TestAddTo:

    def test_weekly_adds_seven_days(self):
        assert BillingCycle.WEEKLY.add_to(utc(2024, 2, 26)) == utc(2024, 3, 4)

    def test_monthly_adds_one_month(self):
        assert BillingCycle.MONTHLY.add_to(utc(2024, 2, 1)) == utc(2024, 3, 1)

    def test_monthly_crosses_year(self):
        assert BillingCycle.MONTHLY.add_to(utc(2023, 12, 15)) == utc(2024, 1, 15)

    def test_monthly_overflow_rolls_over_in_leap_year(self):
        # Feb 2024 has 29 days: "Feb 31" is Mar 2
        assert BillingCycle.MONTHLY.add_to(utc(2024, 1, 31)) == utc(2024, 3, 2)

    def test_monthly_overflow_rolls_over_in_common_year(self):
        assert BillingCycle.MONTHLY.add_to(utc(2023, 1, 31)) == utc(2023, 3, 3)

    def test_monthly_overflow_into_thirty_day_month(self):
        assert BillingCycle.MONTHLY.add_to(utc(2024, 3, 31)) == utc(2024, 5, 1)

    def test_yearly_adds_one_year(self):
        assert BillingCycle.YEARLY.add_to(utc(2024, 3, 10)) == utc(2025, 3, 10)

    def test_yearly_from_leap_day_rolls_over(self):
        assert BillingCycle.YEARLY.add_to(utc(2024, 2, 29)) == utc(2025, 3, 1)

    def test_preserves_time_and_timezone(self):
        tz = timezone(timedelta(hours=-3))
        start = utc(2024, 1, 10, 14, 30).astimezone(tz)
        result = BillingCycle.MONTHLY.add_to(start)
        assert result.tzinfo is tz
        assert (result.hour, result.minute) == (start.hour, start.minute)


class TestParse:

    @pytest.mark.parametrize("value", ["WEEKLY", "monthly", " Yearly "])
    def test_parses_known_literals(self, value):
        assert BillingCycle.parse(value).value == value.strip().upper()

    def test_rejects_unknown_literal(self):
        with pytest.raises(InvalidBillingCycleError):
            BillingCycle.parse("DAILY")
