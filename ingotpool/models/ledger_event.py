"""
Ledger event model.

Append-only audit trail of every state-changing engine operation.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ingotpool.models.base import Base
from ingotpool.models.types import JSONType
from ingotpool.utils.datetime_utils import utc_now


class LedgerEvent(Base):
    """
    LedgerEvent entity.

    Attributes:
        event_type: One of LedgerEventType values
        account: Account the event concerns (actor or subject)
        pool_id: Pool involved, if any
        payload: Event details, amounts rendered as strings
    """

    __tablename__ = "ledger_events"
    __table_args__ = (
        Index("idx_ledger_event_type_created", "event_type", "created_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    event_type: Mapped[str] = mapped_column(String(50), nullable=False)
    account: Mapped[str | None] = mapped_column(
        String(128), nullable=True, index=True
    )
    pool_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    payload: Mapped[dict[str, Any]] = mapped_column(
        JSONType, nullable=False, default=dict
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<LedgerEvent(id={self.id}, type={self.event_type}, "
            f"account={self.account!r}, pool_id={self.pool_id})>"
        )
