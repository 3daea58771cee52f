"""
Process Renewals Service

Scheduled job that ends finished trials and advances active subscriptions
whose billing date has passed. All changes are written in one batch.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from subtrack.domain.interfaces import SubscriptionStore
from subtrack.domain.subscription import Subscription, utcnow


@dataclass
class RenewalRunResult:
    """Counts reported by one renewal run."""
    reference_date: datetime
    activated: int = 0
    renewed: int = 0
    skipped: int = 0

    @property
    def updated(self) -> int:
        return self.activated + self.renewed


class ProcessRenewalsService:
    """
    Activates finished trials and renews due subscriptions.

    Running twice with the same reference date is a no-op the second time:
    renewed subscriptions are no longer due.

    Args:
        subscription_store: Source and sink of subscriptions
        logger: Logger for run diagnostics
    """

    def __init__(
        self,
        subscription_store: SubscriptionStore,
        logger: Optional[logging.Logger] = None,
    ):
        self.subscription_store = subscription_store
        self.logger = logger or logging.getLogger(__name__)

    async def run(self, reference_date: Optional[datetime] = None) -> RenewalRunResult:
        reference_date = reference_date or utcnow()
        result = RenewalRunResult(reference_date=reference_date)
        updated: List[Subscription] = []

        due = await self.subscription_store.find_due_for_renewal(reference_date)
        self.logger.info(
            f"Processing renewals for {reference_date.isoformat()}: {len(due)} due"
        )

        for subscription in due:
            if subscription.is_trial():
                if subscription.activate_from_trial(reference_date):
                    result.activated += 1
                    updated.append(subscription)
                else:
                    result.skipped += 1
                continue

            if subscription.renew(reference_date):
                result.renewed += 1
                updated.append(subscription)
            else:
                self.logger.debug(
                    f"Skipping subscription {subscription.id} with status {subscription.status.value}"
                )
                result.skipped += 1

        # Single atomic batch, called even when nothing changed
        await self.subscription_store.update_many(updated)

        self.logger.info(
            f"Renewals processed: activated={result.activated} "
            f"renewed={result.renewed} skipped={result.skipped}"
        )
        return result
