"""
Referral link repository.

Data access layer for ReferralLink model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ingotpool.models.referral import ReferralLink
from ingotpool.repositories.base import BaseRepository


class ReferralLinkRepository(BaseRepository[ReferralLink]):
    """Referral link repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize referral link repository."""
        super().__init__(ReferralLink, session)

    async def get_downlines(self, referrer_id: str) -> list[str]:
        """
        Get direct referrals in registration order.

        Args:
            referrer_id: Sponsor account

        Returns:
            Referral accounts ordered by position
        """
        stmt = (
            select(ReferralLink.referral_id)
            .where(ReferralLink.referrer_id == referrer_id)
            .order_by(ReferralLink.position)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_downlines(self, referrer_id: str) -> int:
        """Count direct referrals of a sponsor."""
        return await self.count(referrer_id=referrer_id)

    async def append(self, referrer_id: str, referral_id: str) -> ReferralLink:
        """
        Append a referral at the end of the sponsor's downline list.

        Args:
            referrer_id: Sponsor account
            referral_id: New referral account

        Returns:
            Created link
        """
        position = await self.count_downlines(referrer_id)
        return await self.create(
            referrer_id=referrer_id,
            referral_id=referral_id,
            position=position,
        )
