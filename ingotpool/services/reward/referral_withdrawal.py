"""
Referral reward withdrawal.

Pays out the claimable referral reward of a user, bounded by the lifetime
cap of three times their own deposits.
"""

from dataclasses import dataclass
from decimal import Decimal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from ingotpool.models.enums import Asset, LedgerEventType
from ingotpool.repositories.engine_settings_repository import (
    EngineSettingsRepository,
)
from ingotpool.repositories.ledger_event_repository import LedgerEventRepository
from ingotpool.repositories.user_repository import UserRepository
from ingotpool.services.asset.asset_gateway import AssetGateway
from ingotpool.services.reward.reward_calculator import RewardCalculator
from ingotpool.utils.exceptions import ValidationError


@dataclass
class WithdrawalResult:
    """Result of a withdrawal."""

    account: str
    base_value: Decimal
    asset: Asset
    asset_amount: Decimal


class ReferralWithdrawalService:
    """Handles referral reward withdrawals."""

    def __init__(
        self,
        session: AsyncSession,
        gateway: AssetGateway,
        min_withdrawal: Decimal,
    ) -> None:
        """
        Initialize referral withdrawal service.

        Args:
            session: Async database session
            gateway: Asset transfer gateway
            min_withdrawal: Minimum claimable amount for a withdrawal
        """
        self.session = session
        self.gateway = gateway
        self.min_withdrawal = min_withdrawal
        self.user_repo = UserRepository(session)
        self.settings_repo = EngineSettingsRepository(session)
        self.event_repo = LedgerEventRepository(session)
        self.calculator = RewardCalculator()

    async def get_claimable(self, account: str) -> Decimal:
        """
        Claimable referral reward of an account.

        Returns:
            Claimable base value, 0 for unregistered accounts
        """
        user = await self.user_repo.get_by_id(account)
        if user is None:
            return Decimal("0")
        return self.calculator.claimable_for(user)

    async def withdraw(self, account: str, asset: Asset = Asset.A) -> WithdrawalResult:
        """
        Withdraw the full claimable referral reward.

        The withdrawn counter is increased before the transfer by the base
        value of the amount actually paid, so whatever rounding to the
        asset's decimals cuts off stays claimable. A failed transfer aborts
        the operation and the caller rolls back.

        Args:
            account: Withdrawing user
            asset: Asset to be paid in

        Returns:
            WithdrawalResult

        Raises:
            ValidationError: If the user is unregistered or the claimable
                amount is below the minimum
            InsufficientFundsError: If the engine cannot cover the transfer
        """
        user = await self.user_repo.get_for_update(account)
        if user is None:
            raise ValidationError(f"Account {account} is not registered")

        claimable = self.calculator.claimable_for(user)
        if claimable <= 0 or claimable < self.min_withdrawal:
            raise ValidationError(
                f"Claimable referral reward {claimable} is below the "
                f"minimum of {self.min_withdrawal}",
                claimable=str(claimable),
                minimum=str(self.min_withdrawal),
            )

        engine_settings = await self.settings_repo.get_settings()
        asset_amount = self.gateway.from_base_value(
            engine_settings, asset, claimable
        )
        paid = self.gateway.to_base_value(engine_settings, asset, asset_amount)

        user.referral_withdrawn = user.referral_withdrawn + paid
        await self.session.flush()

        await self.event_repo.record(
            LedgerEventType.REFERRAL_REWARD_WITHDRAWN,
            account=account,
            amount=str(paid),
            asset=asset.value,
            asset_amount=str(asset_amount),
        )

        await self.gateway.pay(engine_settings, asset, account, asset_amount)

        logger.info(
            "Referral reward withdrawn",
            extra={
                "account": account,
                "amount": str(paid),
                "asset": asset.value,
                "asset_amount": str(asset_amount),
                "withdrawn_total": str(user.referral_withdrawn),
            },
        )

        return WithdrawalResult(
            account=account,
            base_value=paid,
            asset=asset,
            asset_amount=asset_amount,
        )
