"""
Engine settings model.

Single-row table with runtime administrative configuration.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ingotpool.models.base import Base
from ingotpool.models.enums import Asset
from ingotpool.models.types import RateType
from ingotpool.utils.datetime_utils import utc_now


ENGINE_SETTINGS_ROW_ID = 1


class EngineSettings(Base):
    """
    EngineSettings entity.

    Attributes:
        asset_a_address: Ledger address of asset A
        asset_b_address: Ledger address of asset B
        asset_a_decimals: Decimal precision of asset A
        asset_b_decimals: Decimal precision of asset B
        parity_rate: Value of one unit of asset B expressed in asset A
        emergency_stop_deposits: Suspends new deposits only
        last_created_pool_id: High-water mark of issued pool IDs
    """

    __tablename__ = "engine_settings"
    __table_args__ = (
        CheckConstraint("id = 1", name="check_engine_settings_single_row"),
        CheckConstraint("parity_rate > 0", name="check_engine_parity_positive"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, default=ENGINE_SETTINGS_ROW_ID
    )

    asset_a_address: Mapped[str | None] = mapped_column(
        String(128), nullable=True
    )
    asset_b_address: Mapped[str | None] = mapped_column(
        String(128), nullable=True
    )
    asset_a_decimals: Mapped[int] = mapped_column(Integer, nullable=False)
    asset_b_decimals: Mapped[int] = mapped_column(Integer, nullable=False)
    parity_rate: Mapped[Decimal] = mapped_column(
        RateType, nullable=False, default=Decimal("1")
    )

    emergency_stop_deposits: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    last_created_pool_id: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
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
            f"<EngineSettings(parity={self.parity_rate}, "
            f"halted={self.emergency_stop_deposits}, "
            f"last_pool={self.last_created_pool_id})>"
        )

    def address_of(self, asset: Asset) -> str | None:
        """Ledger address configured for an asset."""
        if asset is Asset.A:
            return self.asset_a_address
        return self.asset_b_address

    def decimals_of(self, asset: Asset) -> int:
        """Decimal precision configured for an asset."""
        if asset is Asset.A:
            return self.asset_a_decimals
        return self.asset_b_decimals
