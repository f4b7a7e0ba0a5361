"""
Ledger event repository.

Data access layer for the LedgerEvent audit trail.
"""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ingotpool.models.enums import LedgerEventType
from ingotpool.models.ledger_event import LedgerEvent
from ingotpool.repositories.base import BaseRepository


class LedgerEventRepository(BaseRepository[LedgerEvent]):
    """Ledger event repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize ledger event repository."""
        super().__init__(LedgerEvent, session)

    async def record(
        self,
        event_type: LedgerEventType,
        account: str | None = None,
        pool_id: int | None = None,
        **payload: Any,
    ) -> LedgerEvent:
        """
        Append an audit event.

        Args:
            event_type: Event type
            account: Account concerned
            pool_id: Pool concerned
            **payload: JSON-serializable details

        Returns:
            Created event
        """
        event = LedgerEvent(
            event_type=event_type.value,
            account=account,
            pool_id=pool_id,
            payload=payload,
        )
        self.session.add(event)
        await self.session.flush()
        return event

    async def list_events(
        self,
        event_type: LedgerEventType | None = None,
        account: str | None = None,
        limit: int = 100,
    ) -> list[LedgerEvent]:
        """
        List events, oldest first.

        Args:
            event_type: Optional type filter
            account: Optional account filter
            limit: Max number of results

        Returns:
            Matching events
        """
        stmt = select(LedgerEvent).order_by(LedgerEvent.id)
        if event_type is not None:
            stmt = stmt.where(LedgerEvent.event_type == event_type.value)
        if account is not None:
            stmt = stmt.where(LedgerEvent.account == account)
        stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
