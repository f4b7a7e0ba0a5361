"""
Treasury service.

Applies the reserve/operational split of every deposit, computes the
coverage ratio gating payouts and handles administrative draws.
"""

from decimal import ROUND_FLOOR, Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from ingotpool.config.business_constants import RESERVE_SHARE_PERCENT
from ingotpool.models.enums import Asset, LedgerEventType
from ingotpool.models.treasury import Treasury
from ingotpool.repositories.engine_settings_repository import (
    EngineSettingsRepository,
)
from ingotpool.repositories.ledger_event_repository import LedgerEventRepository
from ingotpool.repositories.treasury_repository import TreasuryRepository
from ingotpool.services.asset.asset_gateway import AssetGateway
from ingotpool.services.base_service import BaseService
from ingotpool.utils.decimal_utils import mul_div, percent_of, validate_amount
from ingotpool.utils.exceptions import (
    InsufficientFundsError,
    LedgerArithmeticError,
    ValidationError,
)


TREASURY_BUCKETS = ("reserve", "operational")


def split_deposit(value: Decimal) -> tuple[Decimal, Decimal]:
    """
    Split a deposit between reserve and operational.

    The operational share is the remainder, so both parts always add up
    to the deposit.

    Returns:
        (reserve, operational)
    """
    reserve = percent_of(value, RESERVE_SHARE_PERCENT)
    return reserve, value - reserve


def coverage_ratio(balance: Decimal, total_invested: Decimal) -> int:
    """
    Treasury coverage in whole percent.

    Formula: floor(balance * 100 / total_invested)

    Raises:
        LedgerArithmeticError: If nothing has been invested
    """
    if total_invested <= 0:
        raise LedgerArithmeticError("Coverage ratio is undefined without investments")
    ratio = mul_div(balance, 100, total_invested)
    return int(ratio.to_integral_value(rounding=ROUND_FLOOR))


class TreasuryService(BaseService):
    """Treasury bookkeeping."""

    def __init__(self, session: AsyncSession, gateway: AssetGateway | None = None) -> None:
        """
        Initialize treasury service.

        Args:
            session: Async database session
            gateway: Asset gateway, required for draws and sweeps
        """
        super().__init__(session)
        self.gateway = gateway
        self.treasury_repo = TreasuryRepository(session)
        self.settings_repo = EngineSettingsRepository(session)
        self.event_repo = LedgerEventRepository(session)

    async def get_treasury(self) -> Treasury:
        """Get the treasury row."""
        return await self.treasury_repo.get_treasury()

    async def apply_deposit(self, value: Decimal) -> tuple[Decimal, Decimal]:
        """
        Credit a deposit to the treasury.

        Args:
            value: Deposit base value

        Returns:
            (reserve share, operational share)
        """
        treasury = await self.treasury_repo.get_treasury()
        reserve, operational = split_deposit(value)

        treasury.reserve = treasury.reserve + reserve
        treasury.operational = treasury.operational + operational
        treasury.total_invested = treasury.total_invested + value
        await self.flush()

        self.logger.debug(
            "Deposit split applied",
            extra={
                "value": str(value),
                "reserve": str(reserve),
                "operational": str(operational),
            },
        )
        return reserve, operational

    async def add_payout_fee(self, fee: Decimal) -> None:
        """Add a payout fee to reserve."""
        if fee <= 0:
            return
        treasury = await self.treasury_repo.get_treasury()
        treasury.reserve = treasury.reserve + fee
        treasury.fees_collected = treasury.fees_collected + fee
        await self.flush()

    async def get_coverage_ratio(self) -> int:
        """
        Current coverage ratio across all pools.

        Raises:
            LedgerArithmeticError: If nothing has been invested
        """
        treasury = await self.treasury_repo.get_treasury()
        return coverage_ratio(treasury.balance, treasury.total_invested)

    async def withdraw(
        self,
        bucket: str,
        amount: Decimal,
        recipient: str,
        actor: str,
        asset: Asset = Asset.A,
    ) -> Decimal:
        """
        Draw from reserve or operational and pay it out.

        The bucket is debited by the base value of the amount actually paid.

        Args:
            bucket: "reserve" or "operational"
            amount: Base value to draw
            recipient: Destination account
            actor: Administrator performing the draw
            asset: Asset to be paid in

        Returns:
            Amount transferred, in asset units

        Raises:
            ValidationError: On unknown bucket or invalid amount
            InsufficientFundsError: If the bucket or engine balance is lower
        """
        if bucket not in TREASURY_BUCKETS:
            raise ValidationError(f"Unknown treasury bucket: {bucket}")

        engine_settings = await self.settings_repo.get_settings()
        amount = validate_amount(amount, engine_settings.decimals_of(Asset.A))

        treasury = await self.treasury_repo.get_treasury()
        available = getattr(treasury, bucket)
        if amount > available:
            raise InsufficientFundsError(
                f"Requested {amount} exceeds {bucket} balance {available}",
                bucket=bucket,
                requested=str(amount),
                available=str(available),
            )

        asset_amount = self.gateway.from_base_value(engine_settings, asset, amount)
        paid = self.gateway.to_base_value(engine_settings, asset, asset_amount)

        setattr(treasury, bucket, available - paid)
        await self.flush()

        await self.event_repo.record(
            LedgerEventType.TREASURY_WITHDRAWN,
            account=actor,
            bucket=bucket,
            amount=str(paid),
            recipient=recipient,
            asset=asset.value,
            asset_amount=str(asset_amount),
        )

        await self.gateway.pay(engine_settings, asset, recipient, asset_amount)

        self.logger.warning(
            "Treasury draw",
            extra={
                "bucket": bucket,
                "amount": str(paid),
                "recipient": recipient,
                "actor": actor,
                "remaining": str(getattr(treasury, bucket)),
            },
        )
        return asset_amount

    async def sweep(
        self, address: str, recipient: str, amount: Decimal, actor: str
    ) -> None:
        """
        Move an arbitrary asset held by the engine to a recipient.

        The reserve and operational counters are not touched.
        """
        await self.event_repo.record(
            LedgerEventType.ASSET_SWEPT,
            account=actor,
            address=address,
            recipient=recipient,
            amount=str(amount),
        )

        await self.gateway.sweep(address, recipient, amount)

        self.logger.warning(
            "Asset swept",
            extra={
                "address": address,
                "recipient": recipient,
                "amount": str(amount),
                "actor": actor,
            },
        )
