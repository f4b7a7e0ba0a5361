"""
Referral link model.

Ordered downline set: one row per direct referral of a sponsor.
"""

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from ingotpool.models.base import Base
from ingotpool.utils.datetime_utils import utc_now


class ReferralLink(Base):
    """Direct sponsor -> referral link with its position in the downline list."""

    __tablename__ = "referral_links"
    __table_args__ = (
        UniqueConstraint(
            "referrer_id", "referral_id", name="uq_referral_link_pair"
        ),
        UniqueConstraint(
            "referrer_id", "position", name="uq_referral_link_position"
        ),
        CheckConstraint(
            "referrer_id <> referral_id", name="check_referral_link_not_self"
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    referrer_id: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    referral_id: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # 0-based index in the sponsor's downline list
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<ReferralLink(referrer_id={self.referrer_id!r}, "
            f"referral_id={self.referral_id!r}, position={self.position})>"
        )
