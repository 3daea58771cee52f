"""
Unit tests for the in-memory adapters.
"""

import pytest

from subtrack.infrastructure.exceptions import BatchUpdateError
from subtrack.infrastructure.memory import InMemorySubscriptionStore, InMemoryUserDirectory
from tests.factories import make_subscription, make_user, utc


class TestInMemorySubscriptionStore:

    def test_save_assigns_sequential_ids(self):
        store = InMemorySubscriptionStore()

        first = store.save(make_subscription(id=None))
        second = store.save(make_subscription(id=None))

        assert (first.id, second.id) == (1, 2)
        assert len(store.all()) == 2

    def test_returns_copies(self):
        store = InMemorySubscriptionStore([make_subscription(id=None)])

        copy = store.get(1)
        copy.renew(utc(2024, 2, 1))

        assert store.get(1).next_billing_date == utc(2024, 2, 1)

    @pytest.mark.asyncio
    async def test_due_for_renewal_selection(self):
        store = InMemorySubscriptionStore([
            make_subscription(id=None, next_billing_date=utc(2024, 2, 1)),
            make_subscription(id=None, next_billing_date=utc(2024, 2, 2)),
            make_subscription(id=None, status="TRIAL", trial_ends_at=utc(2024, 2, 1)),
            make_subscription(id=None, status="CANCELED", next_billing_date=utc(2024, 1, 1)),
        ])

        due = await store.find_due_for_renewal(utc(2024, 2, 1))

        assert [s.id for s in due] == [1, 3]

    @pytest.mark.asyncio
    async def test_trial_not_due_before_it_ends(self):
        store = InMemorySubscriptionStore([
            make_subscription(id=None, status="TRIAL", trial_ends_at=utc(2024, 2, 1)),
        ])

        assert await store.find_due_for_renewal(utc(2024, 1, 31)) == []
        assert len(await store.find_due_for_renewal(utc(2024, 2, 1))) == 1

    @pytest.mark.asyncio
    async def test_notification_candidates_include_whole_last_day(self):
        store = InMemorySubscriptionStore([
            make_subscription(id=None, next_billing_date=utc(2024, 2, 25, 23, 30)),
            make_subscription(id=None, next_billing_date=utc(2024, 2, 26)),
            make_subscription(id=None, next_billing_date=utc(2024, 2, 20), renewal_notified_at=utc(2024, 2, 14)),
            make_subscription(id=None, status="TRIAL", trial_ends_at=utc(2024, 2, 18), next_billing_date=utc(2024, 2, 18)),
        ])

        candidates = await store.find_subscriptions_to_notify(10, utc(2024, 2, 15, 8))

        assert [s.id for s in candidates] == [1]

    @pytest.mark.asyncio
    async def test_update_many_is_all_or_nothing(self):
        store = InMemorySubscriptionStore([make_subscription(id=None)])
        known = store.get(1)
        known.mark_notified(utc(2024, 1, 25))
        unknown = make_subscription(id=99)

        with pytest.raises(BatchUpdateError):
            await store.update_many([known, unknown])

        assert store.get(1).renewal_notified_at is None

    @pytest.mark.asyncio
    async def test_update_many_persists_changes(self):
        store = InMemorySubscriptionStore([make_subscription(id=None)])
        subscription = store.get(1)
        subscription.mark_notified(utc(2024, 1, 25))

        await store.update_many([subscription])

        assert store.get(1).renewal_notified_at == utc(2024, 1, 25)


class TestInMemoryUserDirectory:

    @pytest.mark.asyncio
    async def test_find_by_id(self):
        directory = InMemoryUserDirectory([make_user()])
        directory.add(make_user(id="user-2", email="two@example.com"))

        assert (await directory.find_by_id("user-2")).email == "two@example.com"
        assert await directory.find_by_id("missing") is None
