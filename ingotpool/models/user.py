"""
User model.

Represents a registered participant and their referral bookkeeping.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from ingotpool.config.business_constants import REFERRAL_DEPTH
from ingotpool.models.base import Base
from ingotpool.models.types import JSONType, MoneyType
from ingotpool.utils.datetime_utils import utc_now


class User(Base):
    """
    User model - registered participants.

    A row exists only for registered accounts. The referrer is fixed at
    registration unless an administrator overrides it.

    Attributes:
        id: Account identifier on the asset ledgers
        referrer_id: Direct sponsor, if any
        uplines: Seven sponsor slots, level 1 first, None when absent
        invested: Cumulative base value deposited by the user
        referral_reward_total: Lifetime referral commissions credited
        referral_withdrawn: Lifetime referral commissions paid out
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "invested >= 0", name="check_user_invested_non_negative"
        ),
        CheckConstraint(
            "referral_withdrawn >= 0",
            name="check_user_referral_withdrawn_non_negative",
        ),
        CheckConstraint(
            "referral_withdrawn <= referral_reward_total",
            name="check_user_referral_withdrawn_not_exceeds_total",
        ),
    )

    id: Mapped[str] = mapped_column(String(128), primary_key=True)

    # Referral
    referrer_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.id"),
        nullable=True,
        index=True,
    )
    uplines: Mapped[list[str | None]] = mapped_column(
        JSONType,
        nullable=False,
        default=lambda: [None] * REFERRAL_DEPTH,
    )

    # Balances
    invested: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    referral_reward_total: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    referral_withdrawn: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<User(id={self.id!r}, referrer_id={self.referrer_id!r}, "
            f"invested={self.invested})>"
        )
