"""
Pending payout model.

Settled pool payouts waiting to be pulled by the user.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from ingotpool.models.base import Base
from ingotpool.models.types import MoneyType
from ingotpool.utils.datetime_utils import utc_now


class PendingPayout(Base):
    """Claimable settled amount per user (base value)."""

    __tablename__ = "pending_payouts"
    __table_args__ = (
        CheckConstraint("amount >= 0", name="check_pending_payout_non_negative"),
    )

    user_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("users.id"), primary_key=True
    )
    amount: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )
    total_credited: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<PendingPayout(user_id={self.user_id!r}, amount={self.amount})>"
