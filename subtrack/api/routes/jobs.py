"""
Scheduled Job Routes

Endpoints called by the external scheduler to run the renewal and
notification jobs. Both are protected by the scheduler API key.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from subtrack.api.dependencies import (
    get_notify_subscriptions_service,
    get_process_renewals_service,
    verify_scheduler_key,
)
from subtrack.config.settings import get_settings
from subtrack.services import NotifySubscriptionsService, ProcessRenewalsService


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/jobs", dependencies=[Depends(verify_scheduler_key)])


# =============================================================================
# Response DTOs
# =============================================================================

class RenewalRunResponse(BaseModel):
    """Response DTO for a renewal run."""
    message: str = "Renewals processed successfully"
    date: datetime
    activated: int = Field(description="Trials converted to active")
    renewed: int = Field(description="Active subscriptions advanced one cycle")
    skipped: int = Field(description="Due subscriptions left unchanged")


class NotificationRunResponse(BaseModel):
    """Response DTO for a notification run."""
    message: str = "Subscription notifications processed successfully"
    date: datetime
    days_before: int
    notified: int = Field(description="Users that were sent a reminder")
    skipped: int = Field(description="Users not found in the directory")
    subscriptions_notified: int
    failed_sends: int = Field(description="Reminders the provider rejected")


def _as_aware(value: Optional[datetime]) -> datetime:
    if value is None:
        return datetime.now(timezone.utc)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# =============================================================================
# Endpoints
# =============================================================================

@router.post("/renewals", response_model=RenewalRunResponse)
async def process_renewals(
    date: Optional[datetime] = Query(default=None, description="Reference date (defaults to now)"),
    service: ProcessRenewalsService = Depends(get_process_renewals_service),
):
    """
    Activate finished trials and renew due subscriptions.

    Store failures propagate and surface as a 500.
    """
    result = await service.run(_as_aware(date))

    return RenewalRunResponse(
        date=result.reference_date,
        activated=result.activated,
        renewed=result.renewed,
        skipped=result.skipped,
    )


@router.post("/notifications", response_model=NotificationRunResponse)
async def notify_subscriptions(
    days_before: Optional[int] = Query(default=None, ge=0, le=365),
    date: Optional[datetime] = Query(default=None, description="Reference date (defaults to now)"),
    service: NotifySubscriptionsService = Depends(get_notify_subscriptions_service),
):
    """Send renewal reminders for subscriptions inside the notification window."""
    if days_before is None:
        days_before = get_settings().notification_days_before

    result = await service.run(days_before, _as_aware(date))

    return NotificationRunResponse(
        date=result.today,
        days_before=result.days_before,
        notified=result.notifications_sent,
        skipped=result.users_skipped,
        subscriptions_notified=result.subscriptions_notified,
        failed_sends=result.failed_sends,
    )
