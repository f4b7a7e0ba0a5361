"""
Integration tests for the engine execution model.

Tests cover:
- Reentrant calls from asset ledgers
- Serialization of concurrent operations
- Rollback of partially applied operations
"""

import asyncio
from decimal import Decimal

import pytest

from ingotpool.models import LedgerEventType
from ingotpool.utils.exceptions import ReentrancyError, StateError


class TestReentrancy:
    """Test the in-flight guard."""

    @pytest.mark.asyncio
    async def test_ledger_callback_cannot_reenter(self, pool_engine, fund, ledger_a):
        await pool_engine.register("bob")
        fund("bob", 1000)

        async def reenter():
            await pool_engine.register("mallory")

        ledger_a.on_transfer = reenter

        with pytest.raises(ReentrancyError):
            await pool_engine.join_pool("bob", 1, Decimal("1000"))

        ledger_a.on_transfer = None
        assert await pool_engine.get_user("mallory") is None
        assert (await pool_engine.get_pool(1)).current_fill == 0

    @pytest.mark.asyncio
    async def test_spawned_task_cannot_reenter(self, pool_engine, fund, ledger_a):
        """Tasks started by a ledger inherit the in-flight marker."""
        await pool_engine.register("bob")
        fund("bob", 1000)

        async def reenter():
            await asyncio.create_task(pool_engine.get_active_pool_id())

        ledger_a.on_transfer = reenter

        with pytest.raises(ReentrancyError):
            await pool_engine.join_pool("bob", 1, Decimal("1000"))

    @pytest.mark.asyncio
    async def test_initialize_cannot_reenter(self, pool_engine, fund, ledger_a):
        await pool_engine.register("alice")
        fund("alice", 1000)

        async def reenter():
            await pool_engine.initialize()

        ledger_a.on_transfer = reenter

        with pytest.raises(ReentrancyError):
            await asyncio.wait_for(
                pool_engine.join_pool("alice", 1, Decimal("1000")), timeout=5
            )

        ledger_a.on_transfer = None
        assert (await pool_engine.get_pool(1)).current_fill == 0

    @pytest.mark.asyncio
    async def test_initialize_is_idempotent(self, pool_engine):
        settings = await pool_engine.initialize()

        assert settings.last_created_pool_id == 1
        assert [p.id for p in await pool_engine.list_pools()] == [1]

    @pytest.mark.asyncio
    async def test_reentrancy_is_a_state_error(self):
        assert issubclass(ReentrancyError, StateError)

    @pytest.mark.asyncio
    async def test_engine_usable_after_rejection(self, pool_engine, fund, ledger_a):
        await pool_engine.register("bob")
        fund("bob", 1000)

        async def reenter():
            await pool_engine.get_treasury()

        ledger_a.on_transfer = reenter
        with pytest.raises(ReentrancyError):
            await pool_engine.join_pool("bob", 1, Decimal("1000"))

        ledger_a.on_transfer = None
        result = await pool_engine.join_pool("bob", 1, Decimal("1000"))
        assert result.ingots == 1


class TestSerialization:
    """Test the single-writer lock."""

    @pytest.mark.asyncio
    async def test_concurrent_deposits(self, pool_engine, fund, ledger_a):
        for account in ("a", "b", "c"):
            await pool_engine.register(account)
            fund(account, 1000)

        async def slow_transfer():
            await asyncio.sleep(0)

        ledger_a.on_transfer = slow_transfer

        await asyncio.gather(
            pool_engine.join_pool("a", 1, Decimal("1000")),
            pool_engine.join_pool("b", 1, Decimal("1000")),
            pool_engine.join_pool("c", 1, Decimal("1000")),
        )

        orders = await pool_engine.get_orders(1)
        assert sorted(o.sequence_no for o in orders) == [1, 2, 3]
        assert (await pool_engine.get_pool(1)).current_fill == 3

    @pytest.mark.asyncio
    async def test_concurrent_fill_rolls_over_once(self, pool_engine, fund):
        await pool_engine.register("a")
        await pool_engine.register("b")
        fund("a", 100000)
        fund("b", 100000)

        results = await asyncio.gather(
            pool_engine.join_pool("a", 1, Decimal("50000")),
            pool_engine.join_pool("b", 1, Decimal("50000")),
            return_exceptions=True,
        )

        assert not [r for r in results if isinstance(r, Exception)]
        pools = await pool_engine.list_pools()
        assert [p.id for p in pools] == [1, 2]
        created = await pool_engine.list_events(LedgerEventType.POOL_CREATED)
        assert [e.pool_id for e in created] == [1, 2]
