"""
User Read Model

Users are managed elsewhere; the renewal engine only needs to resolve an id
to a contact address.
"""

from typing import Optional
from pydantic import BaseModel


class User(BaseModel):
    """Subscription owner as seen by the notification pipeline."""
    id: str
    email: str
    name: Optional[str] = None

    class Config:
        from_attributes = True
