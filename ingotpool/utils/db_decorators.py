"""
Database decorators for automatic commit and rollback.

Wrap async helpers that receive an AsyncSession so that a failure never
leaves a half-written transaction behind.
"""

from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession


T = TypeVar("T")


def _find_session(args: tuple[Any, ...], kwargs: dict[str, Any]) -> AsyncSession | None:
    session = kwargs.get("session")
    if session is None and args and isinstance(args[0], AsyncSession):
        session = args[0]
    return session


def with_auto_commit(func: Callable[..., T]) -> Callable[..., T]:
    """
    Commit the session on success and roll back on error.

    Example:
        @with_auto_commit
        async def bootstrap(session: AsyncSession):
            session.add(Treasury(id=1))
            # Commit happens automatically
    """
    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        session = _find_session(args, kwargs)

        if session is None:
            logger.warning(
                f"Function {func.__name__} decorated with @with_auto_commit "
                f"but no session argument found. Commit/rollback will not be performed."
            )
            return await func(*args, **kwargs)

        try:
            result = await func(*args, **kwargs)
            await session.commit()
            return result
        except Exception as e:
            await session.rollback()
            logger.error(
                f"Auto-commit failed in {func.__name__}: {type(e).__name__}: {e}"
            )
            raise

    return wrapper
