"""
Asset gateway.

Resolves the ledger of each asset from engine settings, converts between
asset units and base value, and performs transfers. Services call the
transfer methods only after all their state changes have been flushed.
"""

from decimal import Decimal

from loguru import logger

from ingotpool.models.engine_settings import EngineSettings
from ingotpool.models.enums import Asset
from ingotpool.services.asset.asset_ledger import AssetLedger, AssetLedgerRegistry
from ingotpool.utils.decimal_utils import mul_div, quantize_down, validate_amount
from ingotpool.utils.exceptions import (
    EngineError,
    InsufficientFundsError,
    StateError,
    TransferError,
    ValidationError,
)


class AssetGateway:
    """Transfer and conversion rules for the two pool assets."""

    def __init__(
        self, registry: AssetLedgerRegistry, engine_account: str
    ) -> None:
        """
        Initialize asset gateway.

        Args:
            registry: Known asset ledgers
            engine_account: Account holding engine funds
        """
        self.registry = registry
        self.engine_account = engine_account

    def ledger_for(self, engine_settings: EngineSettings, asset: Asset) -> AssetLedger:
        """
        Get the ledger configured for an asset.

        Raises:
            StateError: If no address is configured for the asset
        """
        address = engine_settings.address_of(asset)
        if not address:
            raise StateError(f"Asset {asset.value} address is not configured")
        return self.registry.get(address)

    def validate_incoming(
        self, engine_settings: EngineSettings, asset: Asset, amount: Decimal
    ) -> Decimal:
        """Validate an amount against the asset's precision."""
        return validate_amount(amount, engine_settings.decimals_of(asset))

    def to_base_value(
        self, engine_settings: EngineSettings, asset: Asset, amount: Decimal
    ) -> Decimal:
        """
        Convert an asset amount to base value (asset A units).

        Args:
            engine_settings: Current settings (parity rate)
            asset: Asset of the amount
            amount: Amount in asset units

        Returns:
            Base value
        """
        if asset is Asset.A:
            return amount
        return mul_div(amount, engine_settings.parity_rate, 1)

    def from_base_value(
        self, engine_settings: EngineSettings, asset: Asset, value: Decimal
    ) -> Decimal:
        """
        Convert base value to asset units, rounded down to asset decimals.

        Args:
            engine_settings: Current settings (parity rate, decimals)
            asset: Target asset
            value: Base value

        Returns:
            Amount in asset units
        """
        if asset is Asset.B:
            value = mul_div(value, 1, engine_settings.parity_rate)
        return quantize_down(value, engine_settings.decimals_of(asset))

    async def collect(
        self,
        engine_settings: EngineSettings,
        asset: Asset,
        holder: str,
        amount: Decimal,
    ) -> None:
        """
        Pull a deposit from a holder into the engine account.

        Raises:
            TransferError: If the ledger refuses the transfer
        """
        ledger = self.ledger_for(engine_settings, asset)
        ok = await self._call_transfer(
            ledger.transfer_in, holder, amount, asset.value, direction="in"
        )
        if not ok:
            raise TransferError(
                f"Transfer of {amount} {asset.value} from {holder} failed",
                holder=holder,
                amount=str(amount),
                asset=asset.value,
            )

    async def pay(
        self,
        engine_settings: EngineSettings,
        asset: Asset,
        recipient: str,
        amount: Decimal,
    ) -> None:
        """
        Pay an asset amount from the engine account.

        Raises:
            ValidationError: If the amount rounds to zero
            InsufficientFundsError: If the engine balance cannot cover it
            TransferError: If the ledger refuses the transfer
        """
        if amount <= 0:
            raise ValidationError(
                f"Payout amount rounds to zero in asset {asset.value}"
            )

        ledger = self.ledger_for(engine_settings, asset)
        await self._pay_from(ledger, asset.value, recipient, amount)

    async def sweep(self, address: str, recipient: str, amount: Decimal) -> None:
        """
        Pay out any asset held by the engine, by ledger address.

        Raises:
            ValidationError: If the amount is not positive or no ledger is
                registered for the address
            InsufficientFundsError: If the engine balance cannot cover it
            TransferError: If the ledger refuses the transfer
        """
        if amount <= 0:
            raise ValidationError("Sweep amount must be positive")
        ledger = self.registry.get(address)
        await self._pay_from(ledger, address, recipient, amount)

    async def _pay_from(
        self, ledger: AssetLedger, label: str, recipient: str, amount: Decimal
    ) -> None:
        await self.ensure_balance(ledger, label, amount)

        ok = await self._call_transfer(
            ledger.transfer_out, recipient, amount, label, direction="out"
        )
        if not ok:
            raise TransferError(
                f"Transfer of {amount} {label} to {recipient} failed",
                recipient=recipient,
                amount=str(amount),
                asset=label,
            )

    async def ensure_balance(
        self, ledger: AssetLedger, label: str, amount: Decimal
    ) -> None:
        """
        Ensure the engine holds at least ``amount`` on a ledger.

        Raises:
            InsufficientFundsError: If the balance is lower
        """
        balance = await ledger.balance_of(self.engine_account)
        if balance < amount:
            logger.warning(
                "Engine balance too low for transfer",
                extra={
                    "asset": label,
                    "balance": str(balance),
                    "requested": str(amount),
                },
            )
            raise InsufficientFundsError(
                f"Engine balance {balance} is below requested {amount}",
                balance=str(balance),
                requested=str(amount),
            )

    async def _call_transfer(
        self,
        transfer,
        account: str,
        amount: Decimal,
        label: str,
        direction: str,
    ) -> bool:
        try:
            ok = await transfer(account, amount)
        except EngineError:
            raise
        except Exception as e:
            logger.error(
                "Asset ledger transfer raised",
                extra={
                    "asset": label,
                    "direction": direction,
                    "account": account,
                    "amount": str(amount),
                    "error": str(e),
                },
            )
            raise TransferError(
                f"Asset ledger error during transfer {direction}: {e}"
            ) from e

        logger.debug(
            "Asset ledger transfer",
            extra={
                "asset": label,
                "direction": direction,
                "account": account,
                "amount": str(amount),
                "ok": bool(ok),
            },
        )
        return bool(ok)
