"""
Ingot allocation.

Pure helpers converting deposits into pool capacity and classifying pool IDs.
"""

from decimal import Decimal

from ingotpool.config.business_constants import (
    POOL_CAPACITY_INGOTS,
    STANDARD_POOL_MAX_ID,
)
from ingotpool.models.enums import PoolKind
from ingotpool.utils.exceptions import (
    LedgerArithmeticError,
    StateError,
    ValidationError,
)


class IngotAllocator:
    """Allocates ingots for deposits."""

    def __init__(self, capacity: int = POOL_CAPACITY_INGOTS) -> None:
        self.capacity = capacity

    def ingots_for(self, amount: Decimal, ingot_price: Decimal) -> int:
        """
        Number of whole ingots an amount buys.

        Formula: floor(amount / ingot_price)

        Args:
            amount: Deposit in asset units
            ingot_price: Price of one ingot in the same asset

        Returns:
            Ingot count, at least 1

        Raises:
            ValidationError: If the amount is below one ingot
            LedgerArithmeticError: If the price is not positive or the
                division yields no ingot
        """
        if ingot_price <= 0:
            raise LedgerArithmeticError(f"Ingot price must be positive: {ingot_price}")
        if amount < ingot_price:
            raise ValidationError(
                f"Amount {amount} is below the ingot price of {ingot_price}",
                amount=str(amount),
                ingot_price=str(ingot_price),
            )

        ingots = int(amount // ingot_price)
        if ingots <= 0:
            raise LedgerArithmeticError(
                f"Amount {amount} allocates zero ingots",
                amount=str(amount),
            )
        return ingots

    def check_capacity(self, current_fill: int, ingots: int, pool_id: int) -> None:
        """
        Ensure a pool can take ``ingots`` more.

        Raises:
            StateError: If the pool would exceed its capacity
        """
        if current_fill + ingots > self.capacity:
            raise StateError(
                f"Pool {pool_id} has {self.capacity - current_fill} ingots "
                f"left, {ingots} requested",
                pool_id=pool_id,
                remaining=self.capacity - current_fill,
                requested=ingots,
            )


def kind_for_id(pool_id: int) -> PoolKind:
    """Pool kind derived from its ID."""
    if pool_id <= STANDARD_POOL_MAX_ID:
        return PoolKind.STANDARD
    return PoolKind.LOTTERY
