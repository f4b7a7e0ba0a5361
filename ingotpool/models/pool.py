"""
Pool model.

Sequentially numbered, capacity-limited investment pool.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from ingotpool.config.business_constants import POOL_CAPACITY_INGOTS
from ingotpool.models.base import Base
from ingotpool.models.enums import PoolKind, PoolStatus
from ingotpool.models.types import MoneyType
from ingotpool.utils.datetime_utils import utc_now


class Pool(Base):
    """
    Pool entity.

    Pool IDs are assigned by the engine, never autoincremented, and a row
    is never deleted or overwritten once created.

    Attributes:
        id: Pool ID, 1-based
        kind: Standard or Lottery
        current_fill: Ingots allocated so far (0..100)
        is_active: Whether the pool accepts deposits
        is_paid_out: Whether the payout has been settled
        total_invested: Base value deposited into the pool
    """

    __tablename__ = "pools"
    __table_args__ = (
        CheckConstraint("id >= 1", name="check_pool_id_positive"),
        CheckConstraint(
            f"current_fill >= 0 AND current_fill <= {POOL_CAPACITY_INGOTS}",
            name="check_pool_fill_range",
        ),
        CheckConstraint(
            "NOT (is_paid_out AND is_active)",
            name="check_pool_paid_out_inactive",
        ),
        CheckConstraint(
            "total_invested >= 0", name="check_pool_total_invested_non_negative"
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=False
    )
    kind: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PoolKind.STANDARD.value
    )
    current_fill: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, index=True
    )
    is_paid_out: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    total_invested: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    closed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    paid_out_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Pool(id={self.id}, kind={self.kind}, fill={self.current_fill}, "
            f"active={self.is_active}, paid_out={self.is_paid_out})>"
        )

    @property
    def is_full(self) -> bool:
        """Check if the pool reached capacity."""
        return self.current_fill >= POOL_CAPACITY_INGOTS

    @property
    def status(self) -> PoolStatus:
        """Lifecycle state derived from the flags."""
        if self.is_paid_out:
            return PoolStatus.PAID_OUT
        if self.is_full:
            return PoolStatus.FULL
        if self.is_active:
            return PoolStatus.ACTIVE
        return PoolStatus.INACTIVE
