"""
SQLModel ORM Models for SubTrack

Import models here to register them with SQLModel.metadata.
"""

from subtrack.infrastructure.db.models.base import TimestampMixin
from subtrack.infrastructure.db.models.subscription import SubscriptionModel
from subtrack.infrastructure.db.models.user import UserModel


__all__ = [
    "TimestampMixin",
    "SubscriptionModel",
    "UserModel",
]
