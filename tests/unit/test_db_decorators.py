"""Unit tests for session decorators."""

from unittest.mock import AsyncMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from ingotpool.utils.db_decorators import with_auto_commit


class TestWithAutoCommit:
    """Test with_auto_commit."""

    @pytest.mark.asyncio
    async def test_commits_on_success(self, mock_session):
        @with_auto_commit
        async def work(session):
            return "done"

        assert await work(session=mock_session) == "done"
        mock_session.commit.assert_awaited_once()
        mock_session.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rolls_back_and_reraises(self, mock_session):
        @with_auto_commit
        async def work(session):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await work(session=mock_session)
        mock_session.rollback.assert_awaited_once()
        mock_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_positional_session(self):
        """A session passed positionally is detected."""
        session = AsyncMock(spec=AsyncSession)

        @with_auto_commit
        async def work(session, value):
            return value

        assert await work(session, 3) == 3
        session.commit.assert_awaited_once()
