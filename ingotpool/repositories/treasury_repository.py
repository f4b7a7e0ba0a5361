"""
Treasury repository.

Data access layer for the single-row Treasury model.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from ingotpool.models.treasury import TREASURY_ROW_ID, Treasury
from ingotpool.repositories.base import BaseRepository
from ingotpool.utils.exceptions import StateError


class TreasuryRepository(BaseRepository[Treasury]):
    """Treasury repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize treasury repository."""
        super().__init__(Treasury, session)

    async def get_treasury(self) -> Treasury:
        """
        Get the treasury row locked for update.

        Raises:
            StateError: If the ledger has not been initialized
        """
        treasury = await self.get_for_update(TREASURY_ROW_ID)
        if treasury is None:
            raise StateError("Treasury is not initialized")
        return treasury

    async def ensure_exists(self) -> Treasury:
        """Create the treasury row if missing."""
        treasury = await self.get_by_id(TREASURY_ROW_ID)
        if treasury is None:
            treasury = await self.create(id=TREASURY_ROW_ID)
        return treasury
