"""
User repository.

Data access layer for User model.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from ingotpool.models.user import User
from ingotpool.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """User repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize user repository."""
        super().__init__(User, session)

    async def is_registered(self, account: str) -> bool:
        """
        Check whether an account has registered.

        Args:
            account: Account identifier

        Returns:
            True if a user row exists
        """
        return await self.get_by_id(account) is not None
