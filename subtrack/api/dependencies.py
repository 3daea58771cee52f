"""
API Dependencies

FastAPI dependency providers for the scheduler endpoints: API key check,
collaborators and services.
"""

import logging
import secrets
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from subtrack.config.settings import get_settings
from subtrack.domain.interfaces import NotificationSender, SubscriptionStore, UserDirectory
from subtrack.domain.notification_formatter import RenewalNotificationFormatter
from subtrack.infrastructure.db.database import get_db_manager
from subtrack.infrastructure.db.repositories import SqlSubscriptionStore, SqlUserDirectory
from subtrack.infrastructure.notifications import (
    LoggingNotificationSender,
    ResendNotificationSender,
)
from subtrack.services import NotifySubscriptionsService, ProcessRenewalsService


logger = logging.getLogger(__name__)


async def verify_scheduler_key(
    x_api_key: Optional[str] = Header(default=None, alias="X-API-Key"),
) -> None:
    """
    Require the scheduler API key on job endpoints.

    Raises:
        HTTPException 503: no key configured on the server
        HTTPException 401: key missing or wrong
    """
    expected = get_settings().scheduler_api_key
    if not expected:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Scheduler API key is not configured",
        )
    if not x_api_key or not secrets.compare_digest(x_api_key, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
        )


@lru_cache
def get_formatter() -> RenewalNotificationFormatter:
    return RenewalNotificationFormatter(get_settings().notification_locale)


@lru_cache
def get_subscription_store() -> SubscriptionStore:
    return SqlSubscriptionStore(get_db_manager().session_factory)


@lru_cache
def get_user_directory() -> UserDirectory:
    return SqlUserDirectory(get_db_manager().session_factory)


@lru_cache
def get_notification_sender() -> NotificationSender:
    """Resend when configured, log-only otherwise."""
    settings = get_settings()
    if settings.email_enabled:
        return ResendNotificationSender(formatter=get_formatter())

    logger.warning("RESEND_API_KEY not set, renewal reminders will only be logged")
    return LoggingNotificationSender(formatter=get_formatter())


def get_process_renewals_service(
    store: SubscriptionStore = Depends(get_subscription_store),
) -> ProcessRenewalsService:
    return ProcessRenewalsService(store, logger=logging.getLogger("subtrack.jobs.renewals"))


def get_notify_subscriptions_service(
    store: SubscriptionStore = Depends(get_subscription_store),
    users: UserDirectory = Depends(get_user_directory),
    sender: NotificationSender = Depends(get_notification_sender),
    formatter: RenewalNotificationFormatter = Depends(get_formatter),
) -> NotifySubscriptionsService:
    return NotifySubscriptionsService(
        store,
        users,
        sender,
        formatter=formatter,
        logger=logging.getLogger("subtrack.jobs.notifications"),
    )
