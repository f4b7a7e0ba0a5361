"""
Payout engine.

Batch-settles the unpaid orders of a pool behind the treasury coverage
gate, and pays settled balances out on request.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from ingotpool.config.business_constants import COVERAGE_THRESHOLD_PERCENT
from ingotpool.models.enums import Asset, LedgerEventType
from ingotpool.repositories.engine_settings_repository import (
    EngineSettingsRepository,
)
from ingotpool.repositories.ledger_event_repository import LedgerEventRepository
from ingotpool.repositories.order_repository import PoolOrderRepository
from ingotpool.repositories.pending_payout_repository import (
    PendingPayoutRepository,
)
from ingotpool.repositories.pool_repository import PoolRepository
from ingotpool.services.asset.asset_gateway import AssetGateway
from ingotpool.services.base_service import BaseService, log_operation
from ingotpool.services.payout.payout_calculator import PayoutCalculator
from ingotpool.services.reward.referral_withdrawal import WithdrawalResult
from ingotpool.services.treasury_service import TreasuryService
from ingotpool.utils.datetime_utils import utc_now
from ingotpool.utils.exceptions import (
    InsufficientFundsError,
    StateError,
    ValidationError,
)


@dataclass
class PayoutResult:
    """Result of a pool payout."""

    pool_id: int
    coverage_ratio: int
    orders_settled: int = 0
    total_principal: Decimal = Decimal("0")
    total_net: Decimal = Decimal("0")
    total_fees: Decimal = Decimal("0")
    credited: dict[str, Decimal] = field(default_factory=dict)


class PayoutEngine(BaseService):
    """Pool payouts and settled balance withdrawals."""

    def __init__(
        self, session: AsyncSession, gateway: AssetGateway | None = None
    ) -> None:
        """
        Initialize payout engine.

        Args:
            session: Async database session
            gateway: Asset gateway, required for withdrawals
        """
        super().__init__(session)
        self.gateway = gateway
        self.calculator = PayoutCalculator()
        self.pool_repo = PoolRepository(session)
        self.order_repo = PoolOrderRepository(session)
        self.pending_repo = PendingPayoutRepository(session)
        self.settings_repo = EngineSettingsRepository(session)
        self.event_repo = LedgerEventRepository(session)
        self.treasury = TreasuryService(session)

    @log_operation
    async def trigger_payout(self, pool_id: int, actor: str) -> PayoutResult:
        """
        Settle every unpaid order of a pool.

        All eligible orders are settled or none is: the caller rolls the
        whole operation back on any error.

        Args:
            pool_id: Pool to pay out
            actor: Administrator triggering the payout

        Returns:
            PayoutResult

        Raises:
            StateError: Unknown pool, empty pool or pool already paid out
            InsufficientFundsError: Coverage ratio below the threshold
            LedgerArithmeticError: Nothing invested across all pools
        """
        pool = await self.pool_repo.get_for_update(pool_id)
        if pool is None:
            raise StateError(f"Pool {pool_id} does not exist", pool_id=pool_id)
        if pool.current_fill == 0:
            raise StateError(f"Pool {pool_id} is empty", pool_id=pool_id)
        if pool.is_paid_out:
            raise StateError(
                f"Pool {pool_id} is already paid out", pool_id=pool_id
            )

        ratio = await self.treasury.get_coverage_ratio()
        if ratio < COVERAGE_THRESHOLD_PERCENT:
            self.logger.warning(
                "Payout blocked by coverage gate",
                extra={
                    "pool_id": pool_id,
                    "coverage_ratio": ratio,
                    "threshold": COVERAGE_THRESHOLD_PERCENT,
                },
            )
            raise InsufficientFundsError(
                f"Coverage ratio {ratio}% is below "
                f"{COVERAGE_THRESHOLD_PERCENT}%",
                pool_id=pool_id,
                coverage_ratio=ratio,
            )

        result = PayoutResult(pool_id=pool_id, coverage_ratio=ratio)
        now = utc_now()

        for order in await self.order_repo.get_unpaid_orders(pool_id):
            if order.invested_amount <= 0:
                continue

            settlement = self.calculator.settle(
                order.invested_amount, order.interest_rate_percent
            )
            await self.pending_repo.credit(order.user_id, settlement.net)

            order.is_paid_out = True
            order.settled_amount = settlement.net
            order.paid_out_at = now

            result.orders_settled += 1
            result.total_principal += settlement.principal
            result.total_net += settlement.net
            result.total_fees += settlement.fee
            result.credited[order.user_id] = (
                result.credited.get(order.user_id, Decimal("0")) + settlement.net
            )

        await self.treasury.add_payout_fee(result.total_fees)

        pool.is_paid_out = True
        pool.is_active = False
        pool.paid_out_at = now
        if pool.closed_at is None:
            pool.closed_at = now
        await self.flush()

        await self.event_repo.record(
            LedgerEventType.PAYOUT_TRIGGERED,
            account=actor,
            pool_id=pool_id,
            coverage_ratio=ratio,
            orders_settled=result.orders_settled,
            total_net=str(result.total_net),
            total_fees=str(result.total_fees),
        )

        self.logger.info(
            "Pool paid out",
            extra={
                "pool_id": pool_id,
                "coverage_ratio": ratio,
                "orders_settled": result.orders_settled,
                "total_net": str(result.total_net),
                "total_fees": str(result.total_fees),
                "actor": actor,
            },
        )
        return result

    async def get_claimable(self, account: str) -> Decimal:
        """Settled balance awaiting withdrawal."""
        return await self.pending_repo.get_amount(account)

    async def withdraw_reward(
        self, account: str, asset: Asset = Asset.A
    ) -> WithdrawalResult:
        """
        Pay out the settled balance of an account.

        The balance is reduced by the base value of the amount actually paid
        before the transfer. Only what rounding to the asset's decimals cuts
        off remains pending.

        Raises:
            ValidationError: If there is nothing to withdraw
            InsufficientFundsError: If the engine cannot cover the transfer
        """
        pending = await self.pending_repo.get_for_update(account)
        if pending is None or pending.amount <= 0:
            raise ValidationError(
                f"No settled payout to withdraw for {account}", account=account
            )

        engine_settings = await self.settings_repo.get_settings()
        value = pending.amount
        asset_amount = self.gateway.from_base_value(engine_settings, asset, value)
        paid = self.gateway.to_base_value(engine_settings, asset, asset_amount)

        pending.amount = value - paid
        await self.flush()

        await self.event_repo.record(
            LedgerEventType.REWARD_WITHDRAWN,
            account=account,
            amount=str(paid),
            asset=asset.value,
            asset_amount=str(asset_amount),
        )

        await self.gateway.pay(engine_settings, asset, account, asset_amount)

        self.logger.info(
            "Payout withdrawn",
            extra={
                "account": account,
                "amount": str(paid),
                "asset": asset.value,
                "asset_amount": str(asset_amount),
                "remaining": str(pending.amount),
            },
        )
        return WithdrawalResult(
            account=account,
            base_value=paid,
            asset=asset,
            asset_amount=asset_amount,
        )
