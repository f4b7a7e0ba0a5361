"""
Engine settings repository.

Data access layer for the single-row EngineSettings model.
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from ingotpool.models.engine_settings import (
    ENGINE_SETTINGS_ROW_ID,
    EngineSettings,
)
from ingotpool.repositories.base import BaseRepository
from ingotpool.utils.exceptions import StateError


class EngineSettingsRepository(BaseRepository[EngineSettings]):
    """Engine settings repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize engine settings repository."""
        super().__init__(EngineSettings, session)

    async def get_settings(self) -> EngineSettings:
        """
        Get the settings row locked for update.

        Raises:
            StateError: If the ledger has not been initialized
        """
        engine_settings = await self.get_for_update(ENGINE_SETTINGS_ROW_ID)
        if engine_settings is None:
            raise StateError("Engine settings are not initialized")
        return engine_settings

    async def ensure_exists(self, **defaults: Any) -> EngineSettings:
        """Create the settings row with defaults if missing."""
        engine_settings = await self.get_by_id(ENGINE_SETTINGS_ROW_ID)
        if engine_settings is None:
            engine_settings = await self.create(
                id=ENGINE_SETTINGS_ROW_ID, **defaults
            )
        return engine_settings

    async def update_settings(self, **data: Any) -> EngineSettings:
        """
        Update settings fields.

        Args:
            **data: Field values to set

        Returns:
            Updated settings
        """
        engine_settings = await self.get_settings()
        for key, value in data.items():
            setattr(engine_settings, key, value)
        await self.session.flush()
        return engine_settings
