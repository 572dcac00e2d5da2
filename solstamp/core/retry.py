"""solstamp.core.retry

Bounded retries for single remote calls.

- the delay is a strategy: attempt number -> seconds
- sleep is injected so tests never wait on a real timer
- the final failure is re-raised unchanged
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Protocol, TypeVar

from solstamp.core.exceptions import TransientRpcError

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]

log = logging.getLogger(__name__)


class DelayStrategy(Protocol):
    def __call__(self, attempt: int) -> float: ...


@dataclass(frozen=True, slots=True)
class FixedDelay:
    """Same wait after every failed attempt."""

    delay_ms: int = 1000

    def __call__(self, attempt: int) -> float:
        return self.delay_ms / 1000.0


@dataclass(frozen=True, slots=True)
class ExponentialBackoff:
    """``base * 2**(attempt - 1)``, capped at ``max_ms``."""

    base_ms: int = 1000
    max_ms: int = 8000

    def __call__(self, attempt: int) -> float:
        return min(self.base_ms * 2 ** max(attempt - 1, 0), self.max_ms) / 1000.0


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    max_attempts: int = 3
    delay: DelayStrategy = field(default_factory=FixedDelay)
    retry_on: tuple[type[BaseException], ...] = (TransientRpcError,)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")


async def retry_call(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    label: str,
    sleep: Sleep = asyncio.sleep,
    logger: logging.Logger | None = None,
) -> T:
    """Await ``operation()`` up to ``policy.max_attempts`` times.

    Errors outside ``policy.retry_on`` propagate immediately.
    """

    logger = logger or log
    attempt = 1
    while True:
        try:
            return await operation()
        except policy.retry_on as e:
            if attempt >= policy.max_attempts:
                logger.warning(
                    "retry_exhausted",
                    extra={"label": label, "attempts": attempt, "error": str(e)},
                )
                raise
            wait_s = policy.delay(attempt)
            logger.debug(
                "retry_scheduled",
                extra={"label": label, "attempt": attempt, "wait_s": wait_s, "error": str(e)},
            )
            await sleep(wait_s)
            attempt += 1
