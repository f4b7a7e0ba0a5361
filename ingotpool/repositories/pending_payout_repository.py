"""
Pending payout repository.

Data access layer for PendingPayout model.
"""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from ingotpool.models.pending_payout import PendingPayout
from ingotpool.repositories.base import BaseRepository


class PendingPayoutRepository(BaseRepository[PendingPayout]):
    """Pending payout repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize pending payout repository."""
        super().__init__(PendingPayout, session)

    async def get_amount(self, user_id: str) -> Decimal:
        """Claimable settled amount of a user."""
        pending = await self.get_by_id(user_id)
        return pending.amount if pending else Decimal("0")

    async def credit(self, user_id: str, amount: Decimal) -> PendingPayout:
        """
        Increase a user's claimable balance.

        Args:
            user_id: User account
            amount: Base value to add

        Returns:
            Updated pending payout row
        """
        pending = await self.get_for_update(user_id)
        if pending is None:
            pending = PendingPayout(
                user_id=user_id,
                amount=Decimal("0"),
                total_credited=Decimal("0"),
            )
            self.session.add(pending)

        pending.amount = pending.amount + amount
        pending.total_credited = pending.total_credited + amount
        await self.session.flush()
        return pending
