"""
Subscription Database Model

SQLModel table for subscription data persistence.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, Numeric
from sqlmodel import Field

from subtrack.infrastructure.db.models.base import TimestampMixin


class SubscriptionModel(TimestampMixin, table=True):
    """
    Subscription table.

    Maps to the 'subscriptions' table. Status holds ACTIVE, TRIAL or the
    configured terminal status string.
    """

    __tablename__ = "subscriptions"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(index=True, nullable=False, max_length=64)

    # Pricing
    name: str = Field(nullable=False, max_length=255)
    price: Decimal = Field(sa_type=Numeric(10, 2), nullable=False)
    currency: str = Field(default="BRL", max_length=3)
    billing_cycle: str = Field(max_length=16)
    status: str = Field(default="ACTIVE", index=True, max_length=16)

    # Billing dates
    start_date: datetime = Field(sa_type=DateTime(timezone=True), nullable=False)
    next_billing_date: datetime = Field(
        sa_type=DateTime(timezone=True), nullable=False, index=True
    )
    last_billing_date: Optional[datetime] = Field(
        default=None, sa_type=DateTime(timezone=True)
    )
    renewal_notified_at: Optional[datetime] = Field(
        default=None, sa_type=DateTime(timezone=True)
    )
    trial_ends_at: Optional[datetime] = Field(
        default=None, sa_type=DateTime(timezone=True)
    )
