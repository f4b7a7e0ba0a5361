"""
Pool repository.

Data access layer for Pool model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ingotpool.models.pool import Pool
from ingotpool.repositories.base import BaseRepository


class PoolRepository(BaseRepository[Pool]):
    """Pool repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize pool repository."""
        super().__init__(Pool, session)

    async def list_ordered(self, active_only: bool = False) -> list[Pool]:
        """
        List pools by ascending ID.

        Args:
            active_only: Only return pools accepting deposits

        Returns:
            Pools ordered by ID
        """
        stmt = select(Pool).order_by(Pool.id)
        if active_only:
            stmt = stmt.where(Pool.is_active.is_(True))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_lowest_active_id(self) -> int | None:
        """
        Get the lowest active pool ID that still has capacity.

        Returns:
            Pool ID or None when no pool accepts deposits
        """
        for pool in await self.list_ordered(active_only=True):
            if not pool.is_full:
                return pool.id
        return None
