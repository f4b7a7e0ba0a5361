#!/usr/bin/env python3
"""Initialize ledger tables and the first pool."""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from loguru import logger

from ingotpool.config.settings import settings
from ingotpool.database import create_engine, create_session_maker, init_database
from ingotpool.services.bootstrap import bootstrap_ledger
from ingotpool.utils.logging import setup_logging


async def main() -> None:
    """Create all tables, then the settings row, treasury and pool 1."""
    setup_logging(settings.log_level, settings.log_file)

    logger.info("Connecting to database...")
    engine = create_engine(settings.database_url, echo=settings.database_echo)

    try:
        await init_database(engine)

        session_maker = create_session_maker(engine)
        async with session_maker() as session:
            await bootstrap_ledger(session, settings)
    finally:
        await engine.dispose()

    logger.success("Database initialized successfully!")


if __name__ == "__main__":
    asyncio.run(main())
