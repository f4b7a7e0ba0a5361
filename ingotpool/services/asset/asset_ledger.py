"""
Asset ledger interface.

The engine holds two fungible assets on external ledgers. Ledgers are
looked up by the address configured for each asset.
"""

from decimal import Decimal
from typing import Protocol, runtime_checkable

from loguru import logger

from ingotpool.utils.exceptions import ValidationError


@runtime_checkable
class AssetLedger(Protocol):
    """
    External fungible-asset ledger.

    Transfers either fully succeed (True) or fully fail (False or raise).
    """

    async def transfer_in(self, holder: str, amount: Decimal) -> bool:
        """Move ``amount`` from ``holder`` to the engine account."""
        ...

    async def transfer_out(self, recipient: str, amount: Decimal) -> bool:
        """Move ``amount`` from the engine account to ``recipient``."""
        ...

    async def balance_of(self, account: str) -> Decimal:
        """Balance of an account."""
        ...


class AssetLedgerRegistry:
    """Ledgers known to the engine, keyed by asset address."""

    def __init__(self) -> None:
        """Initialize empty registry."""
        self._ledgers: dict[str, AssetLedger] = {}

    def register(self, address: str, ledger: AssetLedger) -> None:
        """
        Register a ledger under an address.

        Args:
            address: Asset address
            ledger: Ledger implementation
        """
        if not isinstance(ledger, AssetLedger):
            raise ValidationError(
                f"Object registered for {address} is not an asset ledger"
            )
        self._ledgers[address.lower()] = ledger
        logger.info("Asset ledger registered", extra={"address": address})

    def get(self, address: str) -> AssetLedger:
        """
        Get ledger by address.

        Raises:
            ValidationError: If no ledger is registered under the address
        """
        ledger = self._ledgers.get(address.lower())
        if ledger is None:
            raise ValidationError(
                f"No asset ledger registered for address {address}",
                address=address,
            )
        return ledger

    def __contains__(self, address: str) -> bool:
        return address.lower() in self._ledgers
