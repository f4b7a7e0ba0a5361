"""
Admin service.

Runtime configuration of the engine: asset addresses and decimals, parity
rate, blacklist and the emergency halt flag. Capability checks happen in
the engine before any of these methods run.
"""

from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from ingotpool.config.business_constants import MAX_TOKEN_DECIMALS
from ingotpool.models.blacklist import Blacklist
from ingotpool.models.engine_settings import EngineSettings
from ingotpool.models.enums import Asset, LedgerEventType
from ingotpool.repositories.blacklist_repository import BlacklistRepository
from ingotpool.repositories.engine_settings_repository import (
    EngineSettingsRepository,
)
from ingotpool.repositories.ledger_event_repository import LedgerEventRepository
from ingotpool.services.asset.asset_ledger import AssetLedgerRegistry
from ingotpool.services.base_service import BaseService
from ingotpool.utils.decimal_utils import to_money
from ingotpool.utils.exceptions import ValidationError


class AdminService(BaseService):
    """Administrative configuration."""

    def __init__(self, session: AsyncSession, registry: AssetLedgerRegistry) -> None:
        """
        Initialize admin service.

        Args:
            session: Async database session
            registry: Known asset ledgers
        """
        super().__init__(session)
        self.registry = registry
        self.settings_repo = EngineSettingsRepository(session)
        self.blacklist_repo = BlacklistRepository(session)
        self.event_repo = LedgerEventRepository(session)

    async def _change(self, actor: str, **changes: Any) -> EngineSettings:
        """Apply settings changes and record them."""
        engine_settings = await self.settings_repo.get_settings()
        previous = {key: getattr(engine_settings, key) for key in changes}
        engine_settings = await self.settings_repo.update_settings(**changes)

        await self.event_repo.record(
            LedgerEventType.SETTINGS_CHANGED,
            account=actor,
            changes={
                key: {"old": str(previous[key]), "new": str(value)}
                for key, value in changes.items()
            },
        )
        self.logger.info(
            "Engine settings changed",
            extra={
                "actor": actor,
                "changes": {key: str(value) for key, value in changes.items()},
            },
        )
        return engine_settings

    async def set_asset_address(
        self, asset: Asset, address: str, actor: str
    ) -> EngineSettings:
        """
        Point an asset at a ledger address.

        Raises:
            ValidationError: If no ledger is registered under the address
        """
        if not address or address not in self.registry:
            raise ValidationError(
                f"No asset ledger registered for address {address}",
                address=address,
            )
        field = "asset_a_address" if asset is Asset.A else "asset_b_address"
        return await self._change(actor, **{field: address})

    async def set_token_decimals(
        self, asset: Asset, decimals: int, actor: str
    ) -> EngineSettings:
        """
        Set the decimal precision of an asset.

        Raises:
            ValidationError: If decimals is outside 0..MAX_TOKEN_DECIMALS
        """
        if not 0 <= decimals <= MAX_TOKEN_DECIMALS:
            raise ValidationError(
                f"Decimals must be within 0..{MAX_TOKEN_DECIMALS}, got {decimals}",
                decimals=decimals,
            )
        field = "asset_a_decimals" if asset is Asset.A else "asset_b_decimals"
        return await self._change(actor, **{field: decimals})

    async def set_parity_rate(self, rate: Decimal, actor: str) -> EngineSettings:
        """
        Set the value of one unit of asset B in asset A.

        Raises:
            ValidationError: If the rate is not positive
        """
        rate = Decimal(str(rate))
        if not rate.is_finite() or rate <= 0:
            raise ValidationError(f"Parity rate must be positive, got {rate}")
        return await self._change(actor, parity_rate=to_money(rate))

    async def set_emergency_halt(self, halted: bool, actor: str) -> EngineSettings:
        """Suspend or resume new deposits."""
        engine_settings = await self.settings_repo.update_settings(
            emergency_stop_deposits=halted
        )

        await self.event_repo.record(
            LedgerEventType.EMERGENCY_HALT_CHANGED,
            account=actor,
            halted=halted,
        )
        if halted:
            self.logger.critical(
                "Deposits halted", extra={"actor": actor}
            )
        else:
            self.logger.warning(
                "Deposits resumed", extra={"actor": actor}
            )
        return engine_settings

    async def set_blacklisted(
        self,
        account: str,
        blacklisted: bool,
        actor: str,
        reason: str | None = None,
    ) -> bool:
        """
        Add or remove an account from the blacklist.

        Returns:
            True if the blacklist changed
        """
        if blacklisted:
            if await self.blacklist_repo.is_blacklisted(account):
                return False
            self.session.add(
                Blacklist(account=account, reason=reason, created_by=actor)
            )
            await self.flush()
        elif not await self.blacklist_repo.remove(account):
            return False

        await self.event_repo.record(
            LedgerEventType.BLACKLIST_CHANGED,
            account=account,
            blacklisted=blacklisted,
            reason=reason,
            actor=actor,
        )
        self.logger.warning(
            "Blacklist changed",
            extra={
                "account": account,
                "blacklisted": blacklisted,
                "actor": actor,
            },
        )
        return True
