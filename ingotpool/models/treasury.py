"""
Treasury model.

Single-row table with the two running treasury balances.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, Integer
from sqlalchemy.orm import Mapped, mapped_column

from ingotpool.models.base import Base
from ingotpool.models.types import MoneyType
from ingotpool.utils.datetime_utils import utc_now


TREASURY_ROW_ID = 1


class Treasury(Base):
    """
    Treasury entity.

    Attributes:
        reserve: 5% share of every deposit plus payout fees
        operational: 95% share of every deposit
        total_invested: Base value deposited across all pools
        fees_collected: Payout fees added to reserve
    """

    __tablename__ = "treasury"
    __table_args__ = (
        CheckConstraint("id = 1", name="check_treasury_single_row"),
        CheckConstraint("reserve >= 0", name="check_treasury_reserve_non_negative"),
        CheckConstraint(
            "operational >= 0", name="check_treasury_operational_non_negative"
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, default=TREASURY_ROW_ID
    )
    reserve: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )
    operational: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )
    total_invested: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )
    fees_collected: Mapped[Decimal] = mapped_column(
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
        return (
            f"<Treasury(reserve={self.reserve}, operational={self.operational}, "
            f"total_invested={self.total_invested})>"
        )

    @property
    def balance(self) -> Decimal:
        """Reserve plus operational."""
        return self.reserve + self.operational
