"""
Repository Layer for SubTrack

Exports all repository classes for dependency injection.
"""

from subtrack.infrastructure.db.repositories.subscription_repository import (
    SqlSubscriptionStore,
)
from subtrack.infrastructure.db.repositories.user_repository import (
    SqlUserDirectory,
)


__all__ = [
    "SqlSubscriptionStore",
    "SqlUserDirectory",
]
