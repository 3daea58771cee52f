"""
User Repository

SQL implementation of the UserDirectory contract.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from subtrack.domain.interfaces import UserDirectory
from subtrack.domain.user import User
from subtrack.infrastructure.db.models.user import UserModel


class SqlUserDirectory(UserDirectory):
    """Resolves subscription owners from the users table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def find_by_id(self, user_id: str) -> Optional[User]:
        """
        Get a user by ID.

        Returns:
            User or None if the account does not exist
        """
        async with self._session_factory() as session:
            result = await session.execute(
                select(UserModel).where(UserModel.id == user_id)
            )
            model = result.scalar_one_or_none()

        if model is None:
            return None
        return User.model_validate(model)
