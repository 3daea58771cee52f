"""
Integration tests for the SQL repositories against a SQLite database.
"""

import pytest
import pytest_asyncio
from sqlalchemy import select

from subtrack.domain.subscription import SubscriptionStatus
from subtrack.infrastructure.db.database import DatabaseManager
from subtrack.infrastructure.db.models import SubscriptionModel, UserModel
from subtrack.infrastructure.db.repositories import SqlSubscriptionStore, SqlUserDirectory
from subtrack.infrastructure.exceptions import BatchUpdateError
from subtrack.services import NotifySubscriptionsService, ProcessRenewalsService
from tests.factories import make_subscription, utc


@pytest_asyncio.fixture
async def db(tmp_path):
    manager = DatabaseManager(f"sqlite+aiosqlite:///{tmp_path / 'subtrack.db'}")
    await manager.create_tables()
    yield manager
    await manager.drop_tables()
    await manager.close()


@pytest_asyncio.fixture
async def store(db):
    return SqlSubscriptionStore(db.session_factory, canceled_status_value="CANCELED")


async def add_user(db, user_id="user-1", email="user1@example.com"):
    async with db.session_factory() as session:
        session.add(UserModel(id=user_id, email=email, name="User One"))
        await session.commit()


class TestSqlSubscriptionStore:

    @pytest.mark.asyncio
    async def test_save_and_load(self, store):
        saved = await store.save(make_subscription(id=None, name="Netflix", price="39.90"))

        assert saved.id is not None
        loaded = await store.find_by_id(saved.id)
        assert loaded.name == "Netflix"
        assert str(loaded.price.amount) == "39.90"
        assert loaded.next_billing_date == utc(2024, 2, 1)
        assert loaded.next_billing_date.tzinfo is not None

    @pytest.mark.asyncio
    async def test_find_by_id_scoped_to_owner(self, store):
        saved = await store.save(make_subscription(id=None, user_id="user-1"))

        assert await store.find_by_id(saved.id, user_id="user-2") is None
        assert await store.find_by_id(saved.id, user_id="user-1") is not None

    @pytest.mark.asyncio
    async def test_find_by_user_id(self, store):
        await store.save_many([
            make_subscription(id=None, user_id="user-1"),
            make_subscription(id=None, user_id="user-2"),
            make_subscription(id=None, user_id="user-1"),
        ])

        owned = await store.find_by_user_id("user-1")

        assert len(owned) == 2
        assert all(s.user_id == "user-1" for s in owned)

    @pytest.mark.asyncio
    async def test_find_due_for_renewal(self, store):
        await store.save_many([
            make_subscription(id=None, name="due", next_billing_date=utc(2024, 2, 1)),
            make_subscription(id=None, name="later", next_billing_date=utc(2024, 2, 2)),
            make_subscription(id=None, name="trial", status="TRIAL", trial_ends_at=utc(2024, 2, 1)),
            make_subscription(id=None, name="trial later", status="TRIAL", trial_ends_at=utc(2024, 2, 5)),
            make_subscription(id=None, name="canceled", status="CANCELED", next_billing_date=utc(2024, 1, 1)),
        ])

        due = await store.find_due_for_renewal(utc(2024, 2, 1))

        assert [s.name for s in due] == ["due", "trial"]

    @pytest.mark.asyncio
    async def test_find_subscriptions_to_notify(self, store):
        await store.save_many([
            make_subscription(id=None, name="in window", next_billing_date=utc(2024, 2, 25, 18)),
            make_subscription(id=None, name="outside", next_billing_date=utc(2024, 2, 26)),
            make_subscription(
                id=None,
                name="notified",
                next_billing_date=utc(2024, 2, 20),
                renewal_notified_at=utc(2024, 2, 12),
            ),
        ])

        candidates = await store.find_subscriptions_to_notify(10, utc(2024, 2, 15))

        assert [s.name for s in candidates] == ["in window"]

    @pytest.mark.asyncio
    async def test_update_many_rolls_back_on_missing_row(self, store):
        saved = await store.save(make_subscription(id=None))
        saved.mark_notified(utc(2024, 1, 25))

        with pytest.raises(BatchUpdateError) as exc_info:
            await store.update_many([saved, make_subscription(id=999)])

        assert exc_info.value.details["subscription_id"] == "999"
        reloaded = await store.find_by_id(saved.id)
        assert reloaded.renewal_notified_at is None

    @pytest.mark.asyncio
    async def test_canceled_status_uses_configured_value(self, db):
        store = SqlSubscriptionStore(db.session_factory, canceled_status_value="INACTIVE")

        saved = await store.save(make_subscription(id=None, status="CANCELED"))

        async with db.session_factory() as session:
            stored = await session.scalar(
                select(SubscriptionModel.status).where(SubscriptionModel.id == saved.id)
            )
        assert stored == "INACTIVE"
        assert (await store.find_by_id(saved.id)).status is SubscriptionStatus.CANCELED


class TestSqlUserDirectory:

    @pytest.mark.asyncio
    async def test_find_by_id(self, db):
        await add_user(db)
        directory = SqlUserDirectory(db.session_factory)

        user = await directory.find_by_id("user-1")

        assert user.email == "user1@example.com"
        assert await directory.find_by_id("missing") is None


class TestJobsAgainstDatabase:

    @pytest.mark.asyncio
    async def test_renew_then_notify(self, db, store, mock_sender):
        await add_user(db)
        await store.save_many([
            make_subscription(id=None, name="Netflix", next_billing_date=utc(2024, 2, 1)),
            make_subscription(
                id=None,
                name="Spotify",
                status="TRIAL",
                trial_ends_at=utc(2024, 1, 31),
                next_billing_date=utc(2024, 2, 29),
            ),
        ])

        renewals = await ProcessRenewalsService(store).run(utc(2024, 2, 1))
        assert (renewals.renewed, renewals.activated) == (1, 1)

        notify = NotifySubscriptionsService(store, SqlUserDirectory(db.session_factory), mock_sender)
        result = await notify.run(10, utc(2024, 2, 21))

        # Netflix renews 2024-03-01, Spotify 2024-03-02: one email for both
        assert result.notifications_sent == 1
        assert result.subscriptions_notified == 2
        args = mock_sender.notify_renewal.call_args.args
        assert args[0] == "user1@example.com"
        assert args[1] == ["Netflix", "Spotify"]

        again = await notify.run(10, utc(2024, 2, 22))
        assert again.notifications_sent == 0
