"""
Deposit service.

Orchestrates a pool join: ingot allocation, order recording, treasury
split, referral rewards and pool rollover, followed by the transfer of the
deposit into the engine account.
"""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from ingotpool.models.enums import Asset, LedgerEventType
from ingotpool.models.order import PoolOrder
from ingotpool.repositories.blacklist_repository import BlacklistRepository
from ingotpool.repositories.engine_settings_repository import (
    EngineSettingsRepository,
)
from ingotpool.repositories.ledger_event_repository import LedgerEventRepository
from ingotpool.repositories.order_repository import PoolOrderRepository
from ingotpool.repositories.user_repository import UserRepository
from ingotpool.services.asset.asset_gateway import AssetGateway
from ingotpool.services.base_service import BaseService, log_operation
from ingotpool.services.pool.allocation import IngotAllocator
from ingotpool.services.pool.pool_manager import PoolManager
from ingotpool.services.reward.referral_reward_processor import (
    ReferralRewardProcessor,
)
from ingotpool.services.treasury_service import TreasuryService
from ingotpool.utils.decimal_utils import to_money
from ingotpool.utils.exceptions import StateError, ValidationError


@dataclass
class DepositResult:
    """Result of a pool join."""

    order: PoolOrder
    ingots: int
    base_value: Decimal
    referral_rewards: Decimal
    next_pool_id: int | None = None


class DepositService(BaseService):
    """Handles pool joins."""

    def __init__(
        self,
        session: AsyncSession,
        gateway: AssetGateway,
        ingot_prices: dict[Asset, Decimal],
        interest_percent: Decimal,
        max_pool_id: int,
    ) -> None:
        """
        Initialize deposit service.

        Args:
            session: Async database session
            gateway: Asset transfer gateway
            ingot_prices: Price of one ingot per asset, in asset units
            interest_percent: Nominal interest recorded on new orders
            max_pool_id: Highest pool ID that may ever be created
        """
        super().__init__(session)
        self.gateway = gateway
        self.ingot_prices = ingot_prices
        self.interest_percent = interest_percent
        self.allocator = IngotAllocator()
        self.user_repo = UserRepository(session)
        self.blacklist_repo = BlacklistRepository(session)
        self.settings_repo = EngineSettingsRepository(session)
        self.order_repo = PoolOrderRepository(session)
        self.event_repo = LedgerEventRepository(session)
        self.pool_manager = PoolManager(session, max_pool_id)
        self.treasury = TreasuryService(session)
        self.rewards = ReferralRewardProcessor(session)

    @log_operation
    async def join_pool(
        self,
        account: str,
        pool_id: int,
        amount: Decimal,
        asset: Asset = Asset.A,
    ) -> DepositResult:
        """
        Deposit into a pool.

        Args:
            account: Depositor
            pool_id: Target pool
            amount: Deposit in asset units
            asset: Deposit asset

        Returns:
            DepositResult

        Raises:
            ValidationError: Unregistered or blacklisted account, invalid
                amount or amount below one ingot
            StateError: Deposits halted, unknown, inactive or full pool,
                or not enough capacity left
            TransferError: If the asset ledger refuses the deposit
        """
        user = await self.user_repo.get_for_update(account)
        if user is None:
            raise ValidationError(f"Account {account} is not registered")

        if await self.blacklist_repo.is_blacklisted(account):
            raise ValidationError(
                f"Account {account} is blacklisted", account=account
            )

        engine_settings = await self.settings_repo.get_settings()
        if engine_settings.emergency_stop_deposits:
            raise StateError("Deposits are suspended by emergency halt")

        amount = self.gateway.validate_incoming(engine_settings, asset, amount)
        ingots = self.allocator.ingots_for(amount, self.ingot_prices[asset])

        pool = await self.pool_manager.get_pool(pool_id)
        if not pool.is_active:
            raise StateError(f"Pool {pool_id} is not active", pool_id=pool_id)
        self.allocator.check_capacity(pool.current_fill, ingots, pool_id)

        value = to_money(self.gateway.to_base_value(engine_settings, asset, amount))

        user.invested = user.invested + value

        order = await self.order_repo.create(
            pool_id=pool_id,
            sequence_no=await self.order_repo.next_sequence_no(pool_id),
            user_id=account,
            invested_amount=value,
            asset_amount=amount,
            ingots=ingots,
            interest_rate_percent=self.interest_percent,
            payment_asset=asset.value,
        )

        pool.current_fill = pool.current_fill + ingots
        pool.total_invested = pool.total_invested + value
        await self.flush()

        await self.treasury.apply_deposit(value)
        rewards = await self.rewards.distribute(user, value, pool_id=pool_id)
        next_pool = await self.pool_manager.rollover_if_full(engine_settings, pool)

        await self.event_repo.record(
            LedgerEventType.JOINED_POOL,
            account=account,
            pool_id=pool_id,
            sequence_no=order.sequence_no,
            amount=str(amount),
            asset=asset.value,
            value=str(value),
            ingots=ingots,
        )

        await self.gateway.collect(engine_settings, asset, account, amount)

        self.logger.info(
            "Joined pool",
            extra={
                "account": account,
                "pool_id": pool_id,
                "ingots": ingots,
                "value": str(value),
                "asset": asset.value,
                "current_fill": pool.current_fill,
            },
        )

        return DepositResult(
            order=order,
            ingots=ingots,
            base_value=value,
            referral_rewards=rewards.total_rewards,
            next_pool_id=next_pool.id if next_pool else None,
        )
