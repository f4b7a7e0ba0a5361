"""
Blacklist model.

Accounts barred from making new deposits.
"""

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ingotpool.models.base import Base
from ingotpool.utils.datetime_utils import utc_now


class Blacklist(Base):
    """Blacklisted account entry."""

    __tablename__ = "blacklist"

    account: Mapped[str] = mapped_column(String(128), primary_key=True)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[str] = mapped_column(String(128), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Blacklist(account={self.account!r})>"
