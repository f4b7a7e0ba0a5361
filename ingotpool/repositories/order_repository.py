"""
Pool order repository.

Data access layer for PoolOrder model.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ingotpool.models.order import PoolOrder
from ingotpool.repositories.base import BaseRepository


class PoolOrderRepository(BaseRepository[PoolOrder]):
    """Pool order repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize pool order repository."""
        super().__init__(PoolOrder, session)

    async def get_pool_orders(self, pool_id: int) -> list[PoolOrder]:
        """
        Get all orders of a pool in sequence order.

        Args:
            pool_id: Pool ID

        Returns:
            Orders ordered by sequence number
        """
        stmt = (
            select(PoolOrder)
            .where(PoolOrder.pool_id == pool_id)
            .order_by(PoolOrder.sequence_no)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_unpaid_orders(self, pool_id: int) -> list[PoolOrder]:
        """
        Get unsettled orders of a pool, locked for update.

        Args:
            pool_id: Pool ID

        Returns:
            Unpaid orders ordered by sequence number
        """
        stmt = (
            select(PoolOrder)
            .where(
                PoolOrder.pool_id == pool_id,
                PoolOrder.is_paid_out.is_(False),
            )
            .order_by(PoolOrder.sequence_no)
            .with_for_update()
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def next_sequence_no(self, pool_id: int) -> int:
        """
        Get the sequence number for the next order of a pool.

        Args:
            pool_id: Pool ID

        Returns:
            1-based sequence number
        """
        stmt = select(func.max(PoolOrder.sequence_no)).where(
            PoolOrder.pool_id == pool_id
        )
        result = await self.session.execute(stmt)
        return (result.scalar() or 0) + 1
