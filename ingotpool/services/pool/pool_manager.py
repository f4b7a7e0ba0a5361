"""
Pool manager.

Issues pool IDs, rolls full pools over to the next sequential ID and
handles administrative pool provisioning. Pool rows are never deleted
or overwritten.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from ingotpool.config.business_constants import FIRST_POOL_ID
from ingotpool.models.engine_settings import EngineSettings
from ingotpool.models.enums import LedgerEventType, PoolKind
from ingotpool.models.pool import Pool
from ingotpool.repositories.engine_settings_repository import (
    EngineSettingsRepository,
)
from ingotpool.repositories.ledger_event_repository import LedgerEventRepository
from ingotpool.repositories.pool_repository import PoolRepository
from ingotpool.services.base_service import BaseService
from ingotpool.services.pool.allocation import kind_for_id
from ingotpool.utils.datetime_utils import utc_now
from ingotpool.utils.exceptions import StateError, ValidationError


class PoolManager(BaseService):
    """Pool lifecycle management."""

    def __init__(self, session: AsyncSession, max_pool_id: int) -> None:
        """
        Initialize pool manager.

        Args:
            session: Async database session
            max_pool_id: Highest pool ID that may ever be created
        """
        super().__init__(session)
        self.max_pool_id = max_pool_id
        self.pool_repo = PoolRepository(session)
        self.settings_repo = EngineSettingsRepository(session)
        self.event_repo = LedgerEventRepository(session)

    async def get_pool(self, pool_id: int) -> Pool:
        """
        Get a pool by ID.

        Raises:
            StateError: If the pool does not exist
        """
        pool = await self.pool_repo.get_for_update(pool_id)
        if pool is None:
            raise StateError(f"Pool {pool_id} does not exist", pool_id=pool_id)
        return pool

    async def create_pool(
        self,
        engine_settings: EngineSettings,
        pool_id: int,
        kind: PoolKind | None = None,
        actor: str | None = None,
    ) -> Pool:
        """
        Create a pool under a specific ID.

        Raises the high-water mark when ``pool_id`` exceeds it.

        Args:
            engine_settings: Settings row holding the high-water mark
            pool_id: ID to create
            kind: Pool kind, derived from the ID when omitted
            actor: Administrator creating the pool, None for rollover

        Returns:
            Created pool

        Raises:
            ValidationError: If the ID is outside 1..max_pool_id
            StateError: If the ID already exists
        """
        if pool_id < FIRST_POOL_ID or pool_id > self.max_pool_id:
            raise ValidationError(
                f"Pool ID {pool_id} is outside {FIRST_POOL_ID}..{self.max_pool_id}",
                pool_id=pool_id,
            )

        if await self.pool_repo.exists(id=pool_id):
            raise StateError(f"Pool {pool_id} already exists", pool_id=pool_id)

        kind = kind or kind_for_id(pool_id)
        pool = await self.pool_repo.create(
            id=pool_id,
            kind=kind.value,
            is_active=True,
        )

        if pool_id > engine_settings.last_created_pool_id:
            engine_settings.last_created_pool_id = pool_id
            await self.flush()

        await self.event_repo.record(
            LedgerEventType.POOL_CREATED,
            account=actor,
            pool_id=pool_id,
            kind=kind.value,
            forced=actor is not None,
        )

        self.logger.info(
            "Pool created",
            extra={
                "pool_id": pool_id,
                "kind": kind.value,
                "actor": actor,
                "last_created_pool_id": engine_settings.last_created_pool_id,
            },
        )
        return pool

    async def ensure_first_pool(self, engine_settings: EngineSettings) -> Pool:
        """Create pool 1 if the ledger has no pool yet."""
        pool = await self.pool_repo.get_by_id(FIRST_POOL_ID)
        if pool is not None:
            return pool
        return await self.create_pool(engine_settings, FIRST_POOL_ID)

    async def rollover_if_full(
        self, engine_settings: EngineSettings, pool: Pool
    ) -> Pool | None:
        """
        Close a full pool and open the next sequential one.

        Nothing happens unless the pool is exactly full and its ID is below
        max_pool_id. A full pool must hand over to exactly one new pool, so
        a deposit that fills it is aborted when no successor can be created.

        Args:
            engine_settings: Settings row holding the high-water mark
            pool: Pool that just received a deposit

        Returns:
            The newly created pool, or None

        Raises:
            StateError: If the pool ID space is exhausted or the next pool
                ID already exists
        """
        if not pool.is_full or pool.id >= self.max_pool_id:
            return None

        next_id = engine_settings.last_created_pool_id + 1
        if next_id > self.max_pool_id:
            self.logger.error(
                "No pool ID left for rollover",
                extra={"pool_id": pool.id, "max_pool_id": self.max_pool_id},
            )
            raise StateError(
                f"Pool {pool.id} is full and no pool ID is left for rollover",
                pool_id=pool.id,
                max_pool_id=self.max_pool_id,
            )

        if await self.pool_repo.exists(id=next_id):
            self.logger.error(
                "Next pool ID already taken during rollover",
                extra={"pool_id": pool.id, "next_pool_id": next_id},
            )
            raise StateError(
                f"Next pool ID {next_id} already exists", pool_id=next_id
            )

        pool.is_active = False
        pool.closed_at = utc_now()
        await self.flush()

        await self.event_repo.record(
            LedgerEventType.POOL_CLOSED,
            pool_id=pool.id,
            total_invested=str(pool.total_invested),
        )

        return await self.create_pool(engine_settings, next_id)

    async def deactivate_pool(self, pool_id: int, actor: str) -> Pool:
        """
        Deactivate a pool that is not full.

        Raises:
            StateError: If the pool does not exist or is already inactive
        """
        pool = await self.get_pool(pool_id)
        if not pool.is_active:
            raise StateError(f"Pool {pool_id} is not active", pool_id=pool_id)

        pool.is_active = False
        pool.closed_at = utc_now()
        await self.flush()

        await self.event_repo.record(
            LedgerEventType.POOL_CLOSED,
            account=actor,
            pool_id=pool_id,
            total_invested=str(pool.total_invested),
            current_fill=pool.current_fill,
        )

        self.logger.warning(
            "Pool deactivated by administrator",
            extra={"pool_id": pool_id, "actor": actor},
        )
        return pool

    async def get_active_pool_id(self) -> int | None:
        """Lowest active pool ID with capacity left."""
        return await self.pool_repo.get_lowest_active_id()

    async def get_next_pool_id(self) -> int | None:
        """ID the next rollover would create, None when exhausted."""
        engine_settings = await self.settings_repo.get_settings()
        next_id = engine_settings.last_created_pool_id + 1
        if next_id > self.max_pool_id:
            return None
        return next_id
