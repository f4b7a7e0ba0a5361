"""
Pool order model.

One row per deposit into a pool. Orders are append-only and change exactly
once, from unpaid to paid, during the pool payout.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from ingotpool.models.base import Base
from ingotpool.models.types import MoneyType, PercentType
from ingotpool.utils.datetime_utils import utc_now


class PoolOrder(Base):
    """
    PoolOrder entity.

    Attributes:
        pool_id: Pool the deposit went into
        sequence_no: 1-based position of the order within its pool
        user_id: Depositor
        invested_amount: Base value of the deposit
        asset_amount: Amount transferred, in units of payment_asset
        ingots: Pool capacity consumed by the order
        interest_rate_percent: Nominal interest paid on settlement
        payment_asset: Asset the deposit was made in
        is_paid_out: Whether the order has been settled
        settled_amount: Net amount credited on settlement
    """

    __tablename__ = "pool_orders"
    __table_args__ = (
        UniqueConstraint(
            "pool_id", "sequence_no", name="uq_pool_order_sequence"
        ),
        CheckConstraint(
            "invested_amount >= 0", name="check_order_invested_non_negative"
        ),
        CheckConstraint("ingots > 0", name="check_order_ingots_positive"),
        Index("idx_pool_order_pool_paid", "pool_id", "is_paid_out"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    pool_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("pools.id"), nullable=False, index=True
    )
    sequence_no: Mapped[int] = mapped_column(Integer, nullable=False)
    user_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("users.id"), nullable=False, index=True
    )

    invested_amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    asset_amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    ingots: Mapped[int] = mapped_column(Integer, nullable=False)
    interest_rate_percent: Mapped[Decimal] = mapped_column(
        PercentType, nullable=False
    )
    payment_asset: Mapped[str] = mapped_column(String(8), nullable=False)

    is_paid_out: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    settled_amount: Mapped[Decimal | None] = mapped_column(
        MoneyType, nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    paid_out_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<PoolOrder(pool_id={self.pool_id}, seq={self.sequence_no}, "
            f"user_id={self.user_id!r}, amount={self.invested_amount}, "
            f"paid_out={self.is_paid_out})>"
        )
