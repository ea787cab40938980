"""Retry policy for transient database failures."""

from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from sqlalchemy.exc import DBAPIError, DisconnectionError, InterfaceError, OperationalError

from catalog_api.core.logging import get_logger
from catalog_api.core.metrics import record_db_retry

T = TypeVar("T")

logger = get_logger("catalog_api.db.retry")

_TRANSIENT_ERRORS = (OperationalError, InterfaceError, DisconnectionError, ConnectionError, TimeoutError)


def is_transient(exc: BaseException) -> bool:
    """True for connectivity failures that are worth another attempt."""
    if isinstance(exc, _TRANSIENT_ERRORS):
        return True
    return isinstance(exc, DBAPIError) and bool(exc.connection_invalidated)


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff: base_delay * 2**(n-1) plus up to 10% jitter, capped at max_delay."""

    max_attempts: int = 5
    base_delay: float = 1.0
    max_delay: float = 30.0
    label: str = "default"

    @classmethod
    def no_retry(cls, label: str = "default") -> "RetryPolicy":
        return cls(max_attempts=1, base_delay=0.0, max_delay=0.0, label=label)

    def delay_for(self, attempt: int) -> float:
        delay = self.base_delay * (2 ** (attempt - 1))
        delay += delay * random.uniform(0, 0.1)
        return min(delay, self.max_delay)

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        on_retry: Callable[[], Awaitable[None]] | None = None,
    ) -> T:
        """Await ``operation`` until it succeeds, fails permanently or attempts run out.

        ``on_retry`` is awaited before each new attempt, typically to roll back
        the failed transaction.
        """
        attempt = 1
        while True:
            try:
                return await operation()
            except Exception as exc:
                if attempt >= self.max_attempts or not is_transient(exc):
                    raise
                delay = self.delay_for(attempt)
                logger.warning(
                    "Transient database failure, retrying",
                    extra={
                        "provider": self.label,
                        "attempt": attempt,
                        "max_attempts": self.max_attempts,
                        "delay_seconds": round(delay, 3),
                        "error": type(exc).__name__,
                    },
                )
                record_db_retry(self.label)
                if on_retry is not None:
                    await on_retry()
                await asyncio.sleep(delay)
                attempt += 1
