"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
from collections import defaultdict
from pathlib import Path

# Minimal environment for Settings, set before any ingotpool import
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ENGINE_ACCOUNT", "engine")
os.environ.setdefault("OWNER_ACCOUNT", "owner")
os.environ.setdefault("ADMIN_ACCOUNTS", "admin")

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.pool import StaticPool

from ingotpool.config.settings import Settings
from ingotpool.database import create_engine, create_session_maker, init_database
from ingotpool.engine import PoolEngine
from ingotpool.models import Asset
from ingotpool.services.asset import AssetLedgerRegistry


ENGINE = "engine"
OWNER = "owner"
ADMIN = "admin"
LEDGER_A = "ledger-a"
LEDGER_B = "ledger-b"


class FakeAssetLedger:
    """In-memory fungible-asset ledger."""

    def __init__(self, engine_account: str = ENGINE) -> None:
        self.engine_account = engine_account
        self.balances: dict[str, Decimal] = defaultdict(Decimal)
        self.refuse_transfers = False
        self.on_transfer = None
        self.transfers: list[tuple[str, str, Decimal]] = []

    def mint(self, account: str, amount: Decimal) -> None:
        self.balances[account] += Decimal(amount)

    async def _move(self, source: str, target: str, amount: Decimal) -> bool:
        if self.on_transfer is not None:
            await self.on_transfer()
        if self.refuse_transfers or self.balances[source] < amount:
            return False
        self.balances[source] -= amount
        self.balances[target] += amount
        self.transfers.append((source, target, amount))
        return True

    async def transfer_in(self, holder: str, amount: Decimal) -> bool:
        return await self._move(holder, self.engine_account, amount)

    async def transfer_out(self, recipient: str, amount: Decimal) -> bool:
        return await self._move(self.engine_account, recipient, amount)

    async def balance_of(self, account: str) -> Decimal:
        return self.balances[account]


@pytest.fixture
def mock_session():
    """Mock AsyncSession for tests without a database."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.flush = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def test_settings():
    """Settings for an isolated in-memory ledger."""
    return Settings(
        database_url="sqlite+aiosqlite://",
        engine_account=ENGINE,
        owner_account=OWNER,
        admin_accounts=ADMIN,
    )


@pytest.fixture
def ledger_factory():
    """Build additional fake ledgers."""
    return FakeAssetLedger


@pytest.fixture
def ledger_a():
    return FakeAssetLedger()


@pytest.fixture
def ledger_b():
    return FakeAssetLedger()


@pytest.fixture
def registry(ledger_a, ledger_b):
    """Registry with both fake ledgers."""
    registry = AssetLedgerRegistry()
    registry.register(LEDGER_A, ledger_a)
    registry.register(LEDGER_B, ledger_b)
    return registry


@pytest.fixture
async def db_engine():
    """In-memory SQLite database with all tables."""
    engine = create_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_database(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(db_engine):
    return create_session_maker(db_engine)


@pytest.fixture
async def pool_engine(session_maker, registry, test_settings):
    """Initialized engine with both assets configured."""
    engine = PoolEngine(session_maker, registry, test_settings)
    await engine.initialize()
    await engine.set_asset_address(OWNER, Asset.A, LEDGER_A)
    await engine.set_asset_address(OWNER, Asset.B, LEDGER_B)
    return engine


@pytest.fixture
def fund(ledger_a, ledger_b):
    """Mint asset balances for an account."""
    def _fund(account: str, amount, asset: Asset = Asset.A) -> None:
        ledger = ledger_a if asset is Asset.A else ledger_b
        ledger.mint(account, Decimal(amount))
    return _fund
