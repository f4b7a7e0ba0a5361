"""
Blacklist repository.

Data access layer for Blacklist model.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from ingotpool.models.blacklist import Blacklist
from ingotpool.repositories.base import BaseRepository


class BlacklistRepository(BaseRepository[Blacklist]):
    """Blacklist repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize blacklist repository."""
        super().__init__(Blacklist, session)

    async def is_blacklisted(self, account: str) -> bool:
        """Check whether an account is blacklisted."""
        return await self.get_by_id(account) is not None

    async def remove(self, account: str) -> bool:
        """
        Remove an account from the blacklist.

        Returns:
            True if an entry was removed
        """
        entry = await self.get_by_id(account)
        if entry is None:
            return False
        await self.session.delete(entry)
        await self.session.flush()
        return True
