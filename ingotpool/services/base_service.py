"""
Base service class.

Provides the session handle and a logger bound to the service name, plus a
decorator timing ledger operations.
"""

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession


T = TypeVar("T")


class BaseService:
    """
    Base service class.

    Services never commit: the engine owns the transaction of every
    operation and commits or rolls back once the service returns.
    """

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize base service.

        Args:
            session: Async database session
        """
        self.session = session
        self.logger = logger.bind(service=self.__class__.__name__)

    async def flush(self) -> None:
        """Flush pending changes so constraints are checked early."""
        await self.session.flush()


def log_operation(func: Callable[..., T]) -> Callable[..., T]:
    """
    Decorator to log failures and duration of a service method.

    Usage:
        @log_operation
        async def trigger_payout(self, pool_id: int):
            ...

    Args:
        func: Async method to wrap

    Returns:
        Wrapped async method
    """
    @functools.wraps(func)
    async def wrapper(self: BaseService, *args: Any, **kwargs: Any) -> Any:
        start_time = time.perf_counter()

        try:
            result = await func(self, *args, **kwargs)
        except Exception as e:
            self.logger.warning(
                f"Failed {func.__name__}",
                extra={
                    "function": func.__name__,
                    "duration_seconds": round(time.perf_counter() - start_time, 3),
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
            )
            raise

        self.logger.debug(
            f"Completed {func.__name__}",
            extra={
                "function": func.__name__,
                "duration_seconds": round(time.perf_counter() - start_time, 3),
            },
        )
        return result

    return wrapper
