"""solstamp.discovery.base

Shared context injected into both locators.

Every remote call made during discovery goes through ``DiscoveryContext.call`` so that it
picks up the same retry policy, sleep, and logger.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from solstamp.core.retry import RetryPolicy, Sleep, retry_call
from solstamp.rpc.client import RpcTransport

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class DiscoveryContext:
    """One endpoint, one discovery attempt."""

    transport: RpcTransport
    retry: RetryPolicy
    sleep: Sleep
    logger: logging.Logger

    async def call(self, label: str, operation: Callable[[], Awaitable[T]]) -> T:
        return await retry_call(operation, self.retry, label=label, sleep=self.sleep, logger=self.logger)
