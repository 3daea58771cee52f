"""
Subscription Repository

SQL implementation of the SubscriptionStore contract plus the CRUD
operations used by creation flows.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import and_, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from subtrack.config.settings import settings
from subtrack.domain.interfaces import SubscriptionStore
from subtrack.domain.money import Money
from subtrack.domain.subscription import (
    Subscription,
    SubscriptionStatus,
    notification_window_end,
    utcnow,
)
from subtrack.infrastructure.db.models.subscription import SubscriptionModel
from subtrack.infrastructure.exceptions import BatchUpdateError, DatabaseError


logger = logging.getLogger(__name__)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive values (SQLite drops tzinfo) and convert aware ones."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SqlSubscriptionStore(SubscriptionStore):
    """
    Repository for subscription data access.

    Each call opens its own session; ``update_many`` runs every write in a
    single transaction.

    Args:
        session_factory: Async session factory bound to the database
        canceled_status_value: String stored for the terminal status
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        canceled_status_value: Optional[str] = None,
    ):
        self._session_factory = session_factory
        self.canceled_status_value = canceled_status_value or settings.canceled_status_value

    # =========================================================================
    # Query Methods
    # =========================================================================

    async def find_by_id(
        self,
        subscription_id: int,
        user_id: Optional[str] = None,
    ) -> Optional[Subscription]:
        """
        Get a subscription by ID, optionally scoped to its owner.

        Returns:
            Subscription or None
        """
        statement = select(SubscriptionModel).where(SubscriptionModel.id == subscription_id)
        if user_id is not None:
            statement = statement.where(SubscriptionModel.user_id == user_id)

        async with self._session_factory() as session:
            result = await session.execute(statement)
            model = result.scalar_one_or_none()

        return self._to_domain(model) if model else None

    async def find_by_user_id(self, user_id: str) -> List[Subscription]:
        statement = (
            select(SubscriptionModel)
            .where(SubscriptionModel.user_id == user_id)
            .order_by(SubscriptionModel.id)
        )
        return await self._fetch(statement)

    async def find_due_for_renewal(self, reference_date: datetime) -> List[Subscription]:
        reference_date = as_utc(reference_date)
        statement = (
            select(SubscriptionModel)
            .where(
                or_(
                    and_(
                        SubscriptionModel.status == SubscriptionStatus.ACTIVE.value,
                        SubscriptionModel.next_billing_date <= reference_date,
                    ),
                    and_(
                        SubscriptionModel.status == SubscriptionStatus.TRIAL.value,
                        SubscriptionModel.trial_ends_at <= reference_date,
                    ),
                )
            )
            .order_by(SubscriptionModel.id)
        )
        return await self._fetch(statement)

    async def find_subscriptions_to_notify(
        self,
        days_before: int,
        today: Optional[datetime] = None,
    ) -> List[Subscription]:
        window_end = notification_window_end(as_utc(today or utcnow()), days_before)
        statement = (
            select(SubscriptionModel)
            .where(
                SubscriptionModel.status == SubscriptionStatus.ACTIVE.value,
                SubscriptionModel.next_billing_date <= window_end,
                SubscriptionModel.renewal_notified_at.is_(None),
            )
            .order_by(SubscriptionModel.id)
        )
        return await self._fetch(statement)

    # =========================================================================
    # Command Methods
    # =========================================================================

    async def save(self, subscription: Subscription) -> Subscription:
        """
        Insert a new subscription and assign its ID.

        Returns:
            The same subscription with ``id`` set
        """
        saved = await self.save_many([subscription])
        return saved[0]

    async def save_many(self, subscriptions: Sequence[Subscription]) -> List[Subscription]:
        """Insert several subscriptions in one transaction."""
        models = [SubscriptionModel(**self._to_values(s)) for s in subscriptions]
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    session.add_all(models)
                    await session.flush()
        except SQLAlchemyError as e:
            raise DatabaseError(
                "Failed to save subscriptions",
                operation="save_many",
                table="subscriptions",
                original_error=e,
            )

        for subscription, model in zip(subscriptions, models):
            subscription.id = model.id
        logger.info(f"Saved {len(models)} subscription(s)")
        return list(subscriptions)

    async def update_many(self, subscriptions: Sequence[Subscription]) -> None:
        if not subscriptions:
            return

        try:
            async with self._session_factory() as session:
                async with session.begin():
                    for subscription in subscriptions:
                        result = await session.execute(
                            update(SubscriptionModel)
                            .where(SubscriptionModel.id == subscription.id)
                            .values(**self._to_values(subscription))
                        )
                        if result.rowcount == 0:
                            # Leaving the begin() block rolls the batch back
                            raise BatchUpdateError(
                                f"Failed to update subscription {subscription.id}",
                                subscription_id=subscription.id,
                            )
        except SQLAlchemyError as e:
            raise BatchUpdateError(
                f"Batch update of {len(subscriptions)} subscription(s) failed",
                original_error=e,
            )

        logger.info(f"Updated {len(subscriptions)} subscription(s)")

    # =========================================================================
    # Mapping Methods
    # =========================================================================

    async def _fetch(self, statement) -> List[Subscription]:
        async with self._session_factory() as session:
            result = await session.execute(statement)
            models = result.scalars().all()
        return [self._to_domain(model) for model in models]

    def _status_to_storage(self, status: SubscriptionStatus) -> str:
        if status is SubscriptionStatus.CANCELED:
            return self.canceled_status_value
        return status.value

    def _to_domain(self, model: SubscriptionModel) -> Subscription:
        """Convert database model to domain entity."""
        status = model.status
        if status == self.canceled_status_value:
            status = SubscriptionStatus.CANCELED

        return Subscription(
            id=model.id,
            user_id=model.user_id,
            name=model.name,
            price=Money(model.price, model.currency),
            currency=model.currency,
            billing_cycle=model.billing_cycle,
            status=status,
            start_date=as_utc(model.start_date),
            next_billing_date=as_utc(model.next_billing_date),
            last_billing_date=as_utc(model.last_billing_date),
            renewal_notified_at=as_utc(model.renewal_notified_at),
            trial_ends_at=as_utc(model.trial_ends_at),
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
        )

    def _to_values(self, domain: Subscription) -> Dict[str, Any]:
        """Convert domain entity to column values."""
        values = {
            "user_id": domain.user_id,
            "name": domain.name,
            "price": domain.price.amount,
            "currency": domain.currency.value,
            "billing_cycle": domain.billing_cycle.value,
            "status": self._status_to_storage(domain.status),
            "start_date": as_utc(domain.start_date),
            "next_billing_date": as_utc(domain.next_billing_date),
            "last_billing_date": as_utc(domain.last_billing_date),
            "renewal_notified_at": as_utc(domain.renewal_notified_at),
            "trial_ends_at": as_utc(domain.trial_ends_at),
            "created_at": as_utc(domain.created_at),
            "updated_at": as_utc(domain.updated_at),
        }
        if domain.id is not None:
            values["id"] = domain.id
        return values
