"""solstamp.rpc.health

Endpoint reachability: one `getVersion` round-trip.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import httpx

from solstamp.core.exceptions import TransientRpcError
from solstamp.rpc.client import SolanaRpcClient

log = logging.getLogger(__name__)


async def check_endpoint(
    url: str,
    *,
    timeout_s: float = 10.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[str, Any]:
    """Return the node's version payload.

    Raises:
        TransientRpcError: the endpoint is unreachable or not a Solana RPC.
    """

    log.debug("endpoint_check", extra={"url": url})
    async with SolanaRpcClient(url, timeout_s=timeout_s, transport=transport) as rpc:
        try:
            version = await rpc.get_version()
        except TransientRpcError as e:
            log.error("endpoint_invalid", extra={"url": url, "error": str(e)})
            raise
    log.debug("endpoint_ok", extra={"url": url, "version": version.get("solana-core")})
    return version


async def filter_reachable(
    urls: Sequence[str],
    *,
    timeout_s: float = 10.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[str]:
    """Keep the URLs that answer `getVersion`, preserving order."""

    ok: list[str] = []
    for url in urls:
        try:
            await check_endpoint(url, timeout_s=timeout_s, transport=transport)
        except TransientRpcError:
            log.debug("endpoint_skipped", extra={"url": url})
            continue
        ok.append(url)
    return ok
