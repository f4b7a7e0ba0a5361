"""
Ledger bootstrap.

Creates the single-row tables and the first pool. Safe to run on every
start: existing rows are left untouched.
"""

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from ingotpool.config.settings import Settings
from ingotpool.models.engine_settings import EngineSettings
from ingotpool.repositories.engine_settings_repository import (
    EngineSettingsRepository,
)
from ingotpool.repositories.treasury_repository import TreasuryRepository
from ingotpool.services.pool.pool_manager import PoolManager
from ingotpool.utils.db_decorators import with_auto_commit


@with_auto_commit
async def bootstrap_ledger(session: AsyncSession, settings: Settings) -> EngineSettings:
    """
    Initialize ledger state.

    Args:
        session: Async database session
        settings: Application settings

    Returns:
        Engine settings row
    """
    engine_settings = await EngineSettingsRepository(session).ensure_exists(
        asset_a_decimals=settings.default_decimals,
        asset_b_decimals=settings.default_decimals,
    )
    await TreasuryRepository(session).ensure_exists()
    await PoolManager(session, settings.max_pool_id).ensure_first_pool(
        engine_settings
    )

    logger.info(
        "Ledger initialized",
        extra={"last_created_pool_id": engine_settings.last_created_pool_id},
    )
    return engine_settings
