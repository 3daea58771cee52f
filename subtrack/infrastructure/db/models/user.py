"""
User Database Model

Read-side copy of the user accounts managed by the auth service.
"""

from typing import Optional

from sqlmodel import Field

from subtrack.infrastructure.db.models.base import TimestampMixin


class UserModel(TimestampMixin, table=True):
    """Maps to the 'users' table."""

    __tablename__ = "users"

    id: str = Field(primary_key=True, max_length=64)
    email: str = Field(index=True, nullable=False, max_length=320)
    name: Optional[str] = Field(default=None, max_length=255)
