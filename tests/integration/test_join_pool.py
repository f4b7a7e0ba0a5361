"""
Integration tests for pool joins.

Tests cover:
- Order recording and treasury split
- Referral rewards credited on deposit
- Asset B deposits converted by parity
- Every failed precondition leaves the ledger untouched
"""

from decimal import Decimal

import pytest

from ingotpool.models import Asset, LedgerEventType
from ingotpool.utils.exceptions import (
    StateError,
    TransferError,
    ValidationError,
)


@pytest.fixture
async def alice_and_bob(pool_engine, fund):
    """Alice is a root user, Bob is her referral with 10000 A."""
    await pool_engine.register("alice")
    await pool_engine.register("bob", "alice")
    fund("bob", 10000)
    return pool_engine


class TestJoinPool:
    """Test successful joins."""

    @pytest.mark.asyncio
    async def test_one_ingot_deposit(self, alice_and_bob, ledger_a):
        """B deposits 1000 into pool 1: A earns 30, treasury gets 50/950."""
        engine = alice_and_bob

        result = await engine.join_pool("bob", 1, Decimal("1000"))

        assert result.ingots == 1
        assert result.base_value == Decimal("1000")
        assert result.referral_rewards == Decimal("30")

        alice = await engine.get_user("alice")
        assert alice.referral_reward_total == Decimal("30")

        pool = await engine.get_pool(1)
        assert pool.current_fill == 1
        assert pool.total_invested == Decimal("1000")

        treasury = await engine.get_treasury()
        assert treasury.reserve == Decimal("50")
        assert treasury.operational == Decimal("950")
        assert treasury.total_invested == Decimal("1000")

        assert ledger_a.balances["bob"] == Decimal("9000")
        assert ledger_a.balances["engine"] == Decimal("1000")

    @pytest.mark.asyncio
    async def test_order_recorded(self, alice_and_bob):
        engine = alice_and_bob

        await engine.join_pool("bob", 1, Decimal("2500"))
        await engine.join_pool("bob", 1, Decimal("1000"))

        orders = await engine.get_orders(1)
        assert [o.sequence_no for o in orders] == [1, 2]
        first = orders[0]
        assert first.user_id == "bob"
        assert first.ingots == 2
        assert first.invested_amount == Decimal("2500")
        assert first.interest_rate_percent == Decimal("10")
        assert first.payment_asset == "A"
        assert first.is_paid_out is False

    @pytest.mark.asyncio
    async def test_remainder_is_still_invested(self, alice_and_bob):
        """The full amount is taken even when it is not a whole ingot count."""
        engine = alice_and_bob

        result = await engine.join_pool("bob", 1, Decimal("1500"))

        assert result.ingots == 1
        bob = await engine.get_user("bob")
        assert bob.invested == Decimal("1500")

    @pytest.mark.asyncio
    async def test_total_invested_matches_orders(self, alice_and_bob, fund):
        engine = alice_and_bob
        fund("alice", 5000)

        await engine.join_pool("bob", 1, Decimal("3000"))
        await engine.join_pool("alice", 1, Decimal("4000"))

        orders = await engine.get_orders(1)
        treasury = await engine.get_treasury()
        total = sum(o.invested_amount for o in orders)
        assert total == treasury.total_invested == Decimal("7000")
        assert treasury.reserve + treasury.operational == Decimal("7000")

    @pytest.mark.asyncio
    async def test_asset_b_converted_by_parity(self, alice_and_bob, fund, ledger_b):
        engine = alice_and_bob
        await engine.set_parity_rate("owner", Decimal("2"))
        fund("bob", 1000, Asset.B)

        result = await engine.join_pool("bob", 1, Decimal("1000"), Asset.B)

        assert result.ingots == 1
        assert result.base_value == Decimal("2000")
        assert result.referral_rewards == Decimal("60")
        order = (await engine.get_orders(1))[0]
        assert order.payment_asset == "B"
        assert order.asset_amount == Decimal("1000")
        assert ledger_b.balances["engine"] == Decimal("1000")

    @pytest.mark.asyncio
    async def test_joined_event(self, alice_and_bob):
        engine = alice_and_bob

        await engine.join_pool("bob", 1, Decimal("1000"))

        events = await engine.list_events(LedgerEventType.JOINED_POOL)
        assert len(events) == 1
        assert events[0].account == "bob"
        assert events[0].pool_id == 1
        assert events[0].payload["ingots"] == 1


class TestJoinPoolFailures:
    """Test join preconditions."""

    async def assert_untouched(self, engine, ledger_a):
        pool = await engine.get_pool(1)
        treasury = await engine.get_treasury()
        assert pool.current_fill == 0
        assert treasury.total_invested == Decimal("0")
        assert await engine.get_orders(1) == []
        assert ledger_a.balances["engine"] == Decimal("0")

    @pytest.mark.asyncio
    async def test_unregistered(self, pool_engine, fund, ledger_a):
        fund("ghost", 1000)
        with pytest.raises(ValidationError):
            await pool_engine.join_pool("ghost", 1, Decimal("1000"))
        await self.assert_untouched(pool_engine, ledger_a)

    @pytest.mark.asyncio
    async def test_below_one_ingot(self, alice_and_bob, ledger_a):
        with pytest.raises(ValidationError):
            await alice_and_bob.join_pool("bob", 1, Decimal("999"))
        await self.assert_untouched(alice_and_bob, ledger_a)

    @pytest.mark.asyncio
    async def test_excess_precision(self, alice_and_bob, ledger_a):
        await alice_and_bob.set_token_decimals("owner", Asset.A, 2)
        with pytest.raises(ValidationError):
            await alice_and_bob.join_pool("bob", 1, Decimal("1000.001"))
        await self.assert_untouched(alice_and_bob, ledger_a)

    @pytest.mark.asyncio
    async def test_unknown_pool(self, alice_and_bob):
        with pytest.raises(StateError):
            await alice_and_bob.join_pool("bob", 5, Decimal("1000"))

    @pytest.mark.asyncio
    async def test_inactive_pool(self, alice_and_bob, ledger_a):
        await alice_and_bob.deactivate_pool("admin", 1)
        with pytest.raises(StateError):
            await alice_and_bob.join_pool("bob", 1, Decimal("1000"))
        await self.assert_untouched(alice_and_bob, ledger_a)

    @pytest.mark.asyncio
    async def test_capacity_exceeded(self, alice_and_bob, fund):
        engine = alice_and_bob
        fund("bob", 200000)
        await engine.join_pool("bob", 1, Decimal("60000"))

        with pytest.raises(StateError):
            await engine.join_pool("bob", 1, Decimal("41000"))

        pool = await engine.get_pool(1)
        assert pool.current_fill == 60

    @pytest.mark.asyncio
    async def test_transfer_refused(self, alice_and_bob, ledger_a):
        """A failed deposit transfer rolls back every ledger change."""
        engine = alice_and_bob
        ledger_a.refuse_transfers = True

        with pytest.raises(TransferError):
            await engine.join_pool("bob", 1, Decimal("1000"))

        await self.assert_untouched(engine, ledger_a)
        alice = await engine.get_user("alice")
        bob = await engine.get_user("bob")
        assert alice.referral_reward_total == Decimal("0")
        assert bob.invested == Decimal("0")
        assert await engine.list_events(LedgerEventType.JOINED_POOL) == []

    @pytest.mark.asyncio
    async def test_insufficient_holder_balance(self, alice_and_bob, ledger_a):
        with pytest.raises(TransferError):
            await alice_and_bob.join_pool("bob", 1, Decimal("20000"))
        await self.assert_untouched(alice_and_bob, ledger_a)

    @pytest.mark.asyncio
    async def test_blacklisted(self, alice_and_bob, ledger_a):
        await alice_and_bob.set_blacklisted("admin", "bob", True, reason="fraud")
        with pytest.raises(ValidationError):
            await alice_and_bob.join_pool("bob", 1, Decimal("1000"))
        await self.assert_untouched(alice_and_bob, ledger_a)

    @pytest.mark.asyncio
    async def test_emergency_halt(self, alice_and_bob, ledger_a):
        await alice_and_bob.set_emergency_halt("admin", True)
        with pytest.raises(StateError):
            await alice_and_bob.join_pool("bob", 1, Decimal("1000"))
        await self.assert_untouched(alice_and_bob, ledger_a)

        await alice_and_bob.set_emergency_halt("admin", False)
        result = await alice_and_bob.join_pool("bob", 1, Decimal("1000"))
        assert result.ingots == 1
