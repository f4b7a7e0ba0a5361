"""
Unit tests for the asset gateway.

Tests cover:
- Conversion between asset units and base value
- Transfer outcomes and balance checks
- Ledger exception handling
"""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from ingotpool.models.engine_settings import EngineSettings
from ingotpool.models.enums import Asset
from ingotpool.services.asset import AssetGateway, AssetLedgerRegistry
from ingotpool.utils.exceptions import (
    InsufficientFundsError,
    ReentrancyError,
    StateError,
    TransferError,
    ValidationError,
)


@pytest.fixture
def engine_settings():
    """Transient settings: B is worth 2 A, A has 6 decimals."""
    return EngineSettings(
        id=1,
        asset_a_address="ledger-a",
        asset_b_address="ledger-b",
        asset_a_decimals=6,
        asset_b_decimals=2,
        parity_rate=Decimal("2"),
        emergency_stop_deposits=False,
        last_created_pool_id=1,
    )


@pytest.fixture
def gateway(registry):
    return AssetGateway(registry, engine_account="engine")


class TestConversion:
    """Test base value conversion."""

    def test_asset_a_is_base(self, gateway, engine_settings):
        value = gateway.to_base_value(engine_settings, Asset.A, Decimal("10"))
        assert value == Decimal("10")

    def test_asset_b_uses_parity(self, gateway, engine_settings):
        value = gateway.to_base_value(engine_settings, Asset.B, Decimal("10"))
        assert value == Decimal("20")

    def test_from_base_rounds_down_to_asset_decimals(self, gateway, engine_settings):
        """5.555 A of base value is 2.7775 B, paid as 2.77."""
        amount = gateway.from_base_value(engine_settings, Asset.B, Decimal("5.555"))
        assert amount == Decimal("2.77")

    def test_validate_incoming_precision(self, gateway, engine_settings):
        with pytest.raises(ValidationError):
            gateway.validate_incoming(engine_settings, Asset.B, Decimal("1.001"))

    def test_unconfigured_asset(self, gateway, engine_settings):
        engine_settings.asset_b_address = None
        with pytest.raises(StateError):
            gateway.ledger_for(engine_settings, Asset.B)


class TestTransfers:
    """Test transfer outcomes."""

    @pytest.mark.asyncio
    async def test_collect_moves_funds(self, gateway, engine_settings, ledger_a):
        ledger_a.mint("alice", Decimal("100"))

        await gateway.collect(engine_settings, Asset.A, "alice", Decimal("40"))

        assert ledger_a.balances["alice"] == Decimal("60")
        assert ledger_a.balances["engine"] == Decimal("40")

    @pytest.mark.asyncio
    async def test_collect_refused(self, gateway, engine_settings):
        with pytest.raises(TransferError):
            await gateway.collect(engine_settings, Asset.A, "alice", Decimal("1"))

    @pytest.mark.asyncio
    async def test_pay_insufficient_balance(self, gateway, engine_settings, ledger_a):
        ledger_a.mint("engine", Decimal("5"))
        with pytest.raises(InsufficientFundsError):
            await gateway.pay(engine_settings, Asset.A, "alice", Decimal("6"))
        assert ledger_a.balances["engine"] == Decimal("5")

    @pytest.mark.asyncio
    async def test_pay_zero_rejected(self, gateway, engine_settings):
        with pytest.raises(ValidationError):
            await gateway.pay(engine_settings, Asset.A, "alice", Decimal("0"))

    @pytest.mark.asyncio
    async def test_ledger_exception_wrapped(self, engine_settings):
        ledger = AsyncMock()
        ledger.balance_of = AsyncMock(return_value=Decimal("100"))
        ledger.transfer_out = AsyncMock(side_effect=ConnectionError("down"))
        ledger.transfer_in = AsyncMock(return_value=True)
        registry = AssetLedgerRegistry()
        registry.register("ledger-a", ledger)
        gateway = AssetGateway(registry, engine_account="engine")

        with pytest.raises(TransferError):
            await gateway.pay(engine_settings, Asset.A, "alice", Decimal("1"))

    @pytest.mark.asyncio
    async def test_engine_errors_pass_through(self, gateway, engine_settings, ledger_a):
        """Errors raised by the engine itself are not rewrapped."""
        ledger_a.mint("alice", Decimal("1"))

        async def reenter():
            raise ReentrancyError("nested call")

        ledger_a.on_transfer = reenter
        with pytest.raises(ReentrancyError):
            await gateway.collect(engine_settings, Asset.A, "alice", Decimal("1"))

    @pytest.mark.asyncio
    async def test_sweep_unknown_address(self, gateway):
        with pytest.raises(ValidationError):
            await gateway.sweep("ledger-x", "owner", Decimal("1"))


class TestRegistry:
    """Test ledger registry."""

    def test_addresses_are_case_insensitive(self, registry):
        assert "LEDGER-A" in registry

    def test_rejects_non_ledger(self):
        with pytest.raises(ValidationError):
            AssetLedgerRegistry().register("x", object())
