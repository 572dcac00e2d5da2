"""solstamp.discovery.orchestrator

Failover across endpoints.

States: Trying(endpoint_i) -> Success | Trying(endpoint_i+1) -> ... -> ExhaustedEndpoints.

Each endpoint gets a fresh transport, a fresh probe cache, and a full coarse + fine
search. Nothing learned on a failed endpoint is carried over.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence

from solstamp.core.exceptions import (
    AllEndpointsExhaustedError,
    EndpointExhaustedError,
    InvalidIdentifierError,
    NoTimestampFoundError,
)
from solstamp.core.identifier import validate_program_id
from solstamp.core.retry import DelayStrategy, FixedDelay, RetryPolicy, Sleep
from solstamp.core.types import DiscoveryOptions, Endpoint, HeightProbeCache, HeightRange
from solstamp.discovery.base import DiscoveryContext
from solstamp.discovery.coarse import CoarseLocator
from solstamp.discovery.fine import FineLocator
from solstamp.rpc.client import RpcTransport, SolanaRpcClient

TransportFactory = Callable[[str], RpcTransport]

log = logging.getLogger(__name__)


class FailoverOrchestrator:
    def __init__(
        self,
        identifier: str,
        endpoints: Sequence[str],
        options: DiscoveryOptions | None = None,
        *,
        transport_factory: TransportFactory | None = None,
        sleep: Sleep | None = None,
        delay: DelayStrategy | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.identifier = identifier
        self.endpoints = [Endpoint(url=url, priority=i) for i, url in enumerate(endpoints)]
        self.options = options or DiscoveryOptions()
        self.transport_factory = transport_factory or SolanaRpcClient
        self.sleep = sleep or asyncio.sleep
        self.retry = RetryPolicy(
            max_attempts=self.options.max_retries,
            delay=delay or FixedDelay(self.options.retry_delay_ms),
        )
        self.logger = logger or log
        self.tried: list[str] = []
        self.last_error: BaseException | None = None

    async def run(self) -> int:
        """Return the earliest block time, or raise.

        Raises:
            InvalidIdentifierError: before any endpoint is contacted.
            AllEndpointsExhaustedError: every endpoint failed or found nothing.
        """

        validate_program_id(self.identifier)
        self.logger.debug("program_id_valid", extra={"identifier": self.identifier})

        for endpoint in self.endpoints:
            self.tried.append(endpoint.url)
            self.logger.debug("endpoint_attempt", extra={"url": endpoint.url, "priority": endpoint.priority})
            try:
                ts = await self._attempt(endpoint)
            except InvalidIdentifierError:
                raise
            except Exception as e:  # noqa: BLE001 - endpoint isolation boundary
                self.last_error = e
                self.logger.warning("endpoint_failed", extra={"url": endpoint.url, "error": str(e)})
                continue

            self.logger.info("timestamp_found", extra={"url": endpoint.url, "timestamp": ts})
            return ts

        raise AllEndpointsExhaustedError(self.last_error)

    async def _attempt(self, endpoint: Endpoint) -> int:
        transport = self.transport_factory(endpoint.url)
        ctx = DiscoveryContext(transport=transport, retry=self.retry, sleep=self.sleep, logger=self.logger)
        try:
            ts = await self._search(ctx, cache={})
        except self.retry.retry_on as e:
            raise EndpointExhaustedError(endpoint.url, e) from e
        finally:
            aclose = getattr(transport, "aclose", None)
            if aclose is not None:
                await aclose()

        if ts is None:
            raise NoTimestampFoundError(f"{endpoint.url}: no transaction with a block time for {self.identifier}")
        return ts

    async def _search(self, ctx: DiscoveryContext, *, cache: HeightProbeCache) -> int | None:
        cursor: str | None = None

        if self.options.strategy == "combined":
            latest = await ctx.call("getSlot", ctx.transport.latest_height)
            if latest >= self.options.min_coarse_height:
                coarse = await CoarseLocator(ctx, self.identifier).locate(HeightRange(low=1, high=latest), cache)
                if coarse is not None:
                    cursor = coarse.signature
            else:
                # small ledger: paginating from the tip is cheaper than bisecting
                ctx.logger.debug("coarse_skipped", extra={"latest": latest})

        return await FineLocator(ctx, self.identifier, page_limit=self.options.page_limit).locate(cursor)


async def discover_first_timestamp(
    identifier: str,
    endpoints: Sequence[str],
    options: DiscoveryOptions | None = None,
    *,
    transport_factory: TransportFactory | None = None,
    sleep: Sleep | None = None,
    delay: DelayStrategy | None = None,
    logger: logging.Logger | None = None,
) -> int:
    """Unix timestamp (seconds) of the first transaction that referenced ``identifier``."""

    orchestrator = FailoverOrchestrator(
        identifier,
        endpoints,
        options,
        transport_factory=transport_factory,
        sleep=sleep,
        delay=delay,
        logger=logger,
    )
    return await orchestrator.run()
