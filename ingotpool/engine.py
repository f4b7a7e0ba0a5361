"""
Pool engine.

Single entry point of the ledger. Every operation runs in its own session
under one lock, commits on success and rolls back on any error. Asset
transfers happen after all state changes are flushed, right before the
commit, so a failed transfer leaves no trace.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from contextvars import ContextVar
from decimal import Decimal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ingotpool.config.settings import Settings
from ingotpool.models import (
    Asset,
    EngineSettings,
    LedgerEvent,
    LedgerEventType,
    Pool,
    PoolKind,
    PoolOrder,
    Treasury,
    User,
)
from ingotpool.repositories import (
    BlacklistRepository,
    EngineSettingsRepository,
    LedgerEventRepository,
    PoolOrderRepository,
    PoolRepository,
    ReferralLinkRepository,
    UserRepository,
)
from ingotpool.services.access_control import AccessControl, Capability
from ingotpool.services.admin_service import AdminService
from ingotpool.services.asset import AssetGateway, AssetLedgerRegistry
from ingotpool.services.bootstrap import bootstrap_ledger
from ingotpool.services.deposit_service import DepositResult, DepositService
from ingotpool.services.payout import PayoutEngine, PayoutResult
from ingotpool.services.pool import PoolManager
from ingotpool.services.referral import ReferralChainManager
from ingotpool.services.reward import ReferralWithdrawalService, WithdrawalResult
from ingotpool.services.treasury_service import TreasuryService
from ingotpool.utils.exceptions import EngineError, ReentrancyError


_operation_in_flight: ContextVar[str | None] = ContextVar(
    "ingotpool_operation_in_flight", default=None
)


class PoolEngine:
    """Pooled investment ledger."""

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        registry: AssetLedgerRegistry,
        settings: Settings,
        access: AccessControl | None = None,
    ) -> None:
        """
        Initialize pool engine.

        Args:
            session_maker: Factory of ledger database sessions
            registry: Asset ledgers the engine may transfer on
            settings: Application settings
            access: Capability map, built from settings when omitted
        """
        self.session_maker = session_maker
        self.registry = registry
        self.settings = settings
        self.access = access or AccessControl.from_settings(settings)
        self.gateway = AssetGateway(registry, settings.engine_account)
        self._lock = asyncio.Lock()

    def _reject_reentry(self, name: str, **context) -> None:
        """
        Refuse to start an operation from inside another one.

        Raises:
            ReentrancyError: If called while an operation is in flight in
                the same execution context
        """
        current = _operation_in_flight.get()
        if current is not None:
            logger.error(
                "Reentrant engine call rejected",
                extra={"operation": name, "in_flight": current, **context},
            )
            raise ReentrancyError(
                f"Cannot run {name} while {current} is in progress",
                operation=name,
                in_flight=current,
            )

    @asynccontextmanager
    async def _operation(self, name: str, **context) -> AsyncIterator[AsyncSession]:
        """
        Run one ledger operation in its own transaction.

        Raises:
            ReentrancyError: If called while an operation is in flight in
                the same execution context
        """
        self._reject_reentry(name, **context)

        async with self._lock:
            token = _operation_in_flight.set(name)
            try:
                async with self.session_maker() as session:
                    try:
                        yield session
                        await session.commit()
                    except EngineError as e:
                        await session.rollback()
                        logger.warning(
                            f"Operation {name} rejected: {e.message}",
                            extra={"operation": name, "code": e.code, **context},
                        )
                        raise
                    except Exception as e:
                        await session.rollback()
                        logger.error(
                            f"Operation {name} failed: {type(e).__name__}: {e}",
                            extra={"operation": name, **context},
                        )
                        raise
            finally:
                _operation_in_flight.reset(token)

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    async def initialize(self) -> EngineSettings:
        """Create the settings row, the treasury row and pool 1 if missing."""
        self._reject_reentry("initialize")

        async with self._lock:
            token = _operation_in_flight.set("initialize")
            try:
                async with self.session_maker() as session:
                    return await bootstrap_ledger(session, self.settings)
            finally:
                _operation_in_flight.reset(token)

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def register(self, account: str, referrer: str | None = None) -> User:
        """Register an account under an optional sponsor."""
        async with self._operation("register", account=account) as session:
            return await ReferralChainManager(session).register(account, referrer)

    async def join_pool(
        self,
        account: str,
        pool_id: int,
        amount: Decimal,
        asset: Asset = Asset.A,
    ) -> DepositResult:
        """Deposit ``amount`` of ``asset`` into a pool."""
        async with self._operation(
            "join_pool", account=account, pool_id=pool_id
        ) as session:
            service = DepositService(
                session,
                self.gateway,
                ingot_prices={
                    Asset.A: self.settings.ingot_price_a,
                    Asset.B: self.settings.ingot_price_b,
                },
                interest_percent=self.settings.order_interest_percent,
                max_pool_id=self.settings.max_pool_id,
            )
            return await service.join_pool(account, pool_id, amount, asset)

    async def withdraw_referral_reward(
        self, account: str, asset: Asset = Asset.A
    ) -> WithdrawalResult:
        """Withdraw the claimable referral reward of an account."""
        async with self._operation(
            "withdraw_referral_reward", account=account
        ) as session:
            service = ReferralWithdrawalService(
                session, self.gateway, self.settings.min_referral_withdrawal
            )
            return await service.withdraw(account, asset)

    async def withdraw_reward(
        self, account: str, asset: Asset = Asset.A
    ) -> WithdrawalResult:
        """Withdraw the settled pool payout of an account."""
        async with self._operation("withdraw_reward", account=account) as session:
            return await PayoutEngine(session, self.gateway).withdraw_reward(
                account, asset
            )

    # ------------------------------------------------------------------
    # Administrative operations
    # ------------------------------------------------------------------

    async def change_referrer(
        self, caller: str, account: str, new_referrer: str | None
    ) -> User:
        """Override the sponsor of a user."""
        self.access.require(caller, Capability.MANAGE_REFERRALS)
        async with self._operation(
            "change_referrer", caller=caller, account=account
        ) as session:
            return await ReferralChainManager(session).change_referrer(
                account, new_referrer, actor=caller
            )

    async def force_create_pool(
        self, caller: str, pool_id: int, kind: PoolKind | None = None
    ) -> Pool:
        """Create a specific pool ID that does not exist yet."""
        self.access.require(caller, Capability.MANAGE_POOLS)
        async with self._operation(
            "force_create_pool", caller=caller, pool_id=pool_id
        ) as session:
            engine_settings = await EngineSettingsRepository(session).get_settings()
            manager = PoolManager(session, self.settings.max_pool_id)
            return await manager.create_pool(
                engine_settings, pool_id, kind, actor=caller
            )

    async def deactivate_pool(self, caller: str, pool_id: int) -> Pool:
        """Stop a pool from accepting deposits."""
        self.access.require(caller, Capability.MANAGE_POOLS)
        async with self._operation(
            "deactivate_pool", caller=caller, pool_id=pool_id
        ) as session:
            manager = PoolManager(session, self.settings.max_pool_id)
            return await manager.deactivate_pool(pool_id, actor=caller)

    async def trigger_payout(self, caller: str, pool_id: int) -> PayoutResult:
        """Settle every unpaid order of a pool."""
        self.access.require(caller, Capability.TRIGGER_PAYOUT)
        async with self._operation(
            "trigger_payout", caller=caller, pool_id=pool_id
        ) as session:
            return await PayoutEngine(session).trigger_payout(pool_id, actor=caller)

    async def withdraw_reserve(
        self,
        caller: str,
        amount: Decimal,
        recipient: str,
        asset: Asset = Asset.A,
    ) -> Decimal:
        """Draw from the reserve balance."""
        return await self._withdraw_treasury(
            caller, "reserve", amount, recipient, asset
        )

    async def withdraw_operational(
        self,
        caller: str,
        amount: Decimal,
        recipient: str,
        asset: Asset = Asset.A,
    ) -> Decimal:
        """Draw from the operational balance."""
        return await self._withdraw_treasury(
            caller, "operational", amount, recipient, asset
        )

    async def _withdraw_treasury(
        self,
        caller: str,
        bucket: str,
        amount: Decimal,
        recipient: str,
        asset: Asset,
    ) -> Decimal:
        self.access.require(caller, Capability.MANAGE_TREASURY)
        async with self._operation(
            f"withdraw_{bucket}", caller=caller, recipient=recipient
        ) as session:
            return await TreasuryService(session, self.gateway).withdraw(
                bucket, amount, recipient, actor=caller, asset=asset
            )

    async def sweep(
        self, caller: str, address: str, recipient: str, amount: Decimal
    ) -> None:
        """Move an arbitrary asset held by the engine to a recipient."""
        self.access.require(caller, Capability.MANAGE_TREASURY)
        async with self._operation(
            "sweep", caller=caller, address=address, recipient=recipient
        ) as session:
            await TreasuryService(session, self.gateway).sweep(
                address, recipient, amount, actor=caller
            )

    async def set_asset_address(
        self, caller: str, asset: Asset, address: str
    ) -> EngineSettings:
        """Point an asset at a registered ledger."""
        self.access.require(caller, Capability.MANAGE_CONFIG)
        async with self._operation("set_asset_address", caller=caller) as session:
            return await AdminService(session, self.registry).set_asset_address(
                asset, address, actor=caller
            )

    async def set_token_decimals(
        self, caller: str, asset: Asset, decimals: int
    ) -> EngineSettings:
        """Set the decimal precision of an asset."""
        self.access.require(caller, Capability.MANAGE_CONFIG)
        async with self._operation("set_token_decimals", caller=caller) as session:
            return await AdminService(session, self.registry).set_token_decimals(
                asset, decimals, actor=caller
            )

    async def set_parity_rate(self, caller: str, rate: Decimal) -> EngineSettings:
        """Set the value of one unit of asset B in asset A."""
        self.access.require(caller, Capability.MANAGE_CONFIG)
        async with self._operation("set_parity_rate", caller=caller) as session:
            return await AdminService(session, self.registry).set_parity_rate(
                rate, actor=caller
            )

    async def set_blacklisted(
        self,
        caller: str,
        account: str,
        blacklisted: bool,
        reason: str | None = None,
    ) -> bool:
        """Add or remove an account from the blacklist."""
        self.access.require(caller, Capability.MANAGE_BLACKLIST)
        async with self._operation(
            "set_blacklisted", caller=caller, account=account
        ) as session:
            return await AdminService(session, self.registry).set_blacklisted(
                account, blacklisted, actor=caller, reason=reason
            )

    async def set_emergency_halt(self, caller: str, halted: bool) -> EngineSettings:
        """Suspend or resume new deposits."""
        self.access.require(caller, Capability.EMERGENCY_HALT)
        async with self._operation("set_emergency_halt", caller=caller) as session:
            return await AdminService(session, self.registry).set_emergency_halt(
                halted, actor=caller
            )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_user(self, account: str) -> User | None:
        async with self._operation("get_user") as session:
            return await UserRepository(session).get_by_id(account)

    async def get_downlines(self, account: str) -> list[str]:
        """Direct referrals of an account, in registration order."""
        async with self._operation("get_downlines") as session:
            return await ReferralLinkRepository(session).get_downlines(account)

    async def get_pool(self, pool_id: int) -> Pool | None:
        async with self._operation("get_pool") as session:
            return await PoolRepository(session).get_by_id(pool_id)

    async def list_pools(self, active_only: bool = False) -> list[Pool]:
        async with self._operation("list_pools") as session:
            return await PoolRepository(session).list_ordered(active_only)

    async def get_orders(self, pool_id: int) -> list[PoolOrder]:
        """Orders of a pool in sequence order."""
        async with self._operation("get_orders") as session:
            return await PoolOrderRepository(session).get_pool_orders(pool_id)

    async def get_treasury(self) -> Treasury:
        async with self._operation("get_treasury") as session:
            return await TreasuryService(session).get_treasury()

    async def get_settings(self) -> EngineSettings:
        async with self._operation("get_settings") as session:
            return await EngineSettingsRepository(session).get_settings()

    async def get_coverage_ratio(self) -> int:
        """
        Treasury coverage in whole percent.

        Raises:
            LedgerArithmeticError: If nothing has been invested
        """
        async with self._operation("get_coverage_ratio") as session:
            return await TreasuryService(session).get_coverage_ratio()

    async def get_claimable_referral_amount(self, account: str) -> Decimal:
        async with self._operation("get_claimable_referral_amount") as session:
            service = ReferralWithdrawalService(
                session, self.gateway, self.settings.min_referral_withdrawal
            )
            return await service.get_claimable(account)

    async def get_claimable_payout(self, account: str) -> Decimal:
        async with self._operation("get_claimable_payout") as session:
            return await PayoutEngine(session).get_claimable(account)

    async def get_active_pool_id(self) -> int | None:
        """Lowest active pool with capacity left, None if there is none."""
        async with self._operation("get_active_pool_id") as session:
            manager = PoolManager(session, self.settings.max_pool_id)
            return await manager.get_active_pool_id()

    async def get_next_pool_id(self) -> int | None:
        """Pool ID the next rollover would create, None once exhausted."""
        async with self._operation("get_next_pool_id") as session:
            manager = PoolManager(session, self.settings.max_pool_id)
            return await manager.get_next_pool_id()

    async def is_blacklisted(self, account: str) -> bool:
        async with self._operation("is_blacklisted") as session:
            return await BlacklistRepository(session).is_blacklisted(account)

    async def list_events(
        self,
        event_type: LedgerEventType | None = None,
        account: str | None = None,
        limit: int = 100,
    ) -> list[LedgerEvent]:
        """Audit events, oldest first."""
        async with self._operation("list_events") as session:
            return await LedgerEventRepository(session).list_events(
                event_type, account, limit
            )
