"""solstamp.rpc.client

Solana JSON-RPC transport over a shared async HTTP client with:
- rate limiting (token bucket)
- one failure type for every way a call can go wrong

Lightweight: no solana/solders dependency, raw JSON-RPC only.
Retries live in the caller (solstamp.core.retry), not here.
"""

from __future__ import annotations

import asyncio
import itertools
import time
from typing import Any, Protocol, runtime_checkable

import httpx

from solstamp.core.exceptions import RpcResponseError, TransientRpcError
from solstamp.core.types import Block, SignatureInfo, TransactionInfo

# getBlock errors that mean "no block at this slot" rather than "call failed"
BLOCK_NOT_AVAILABLE = -32004
SLOT_SKIPPED = -32007
LONG_TERM_STORAGE_SLOT_SKIPPED = -32009
ABSENT_BLOCK_CODES = frozenset({BLOCK_NOT_AVAILABLE, SLOT_SKIPPED, LONG_TERM_STORAGE_SLOT_SKIPPED})


@runtime_checkable
class RpcTransport(Protocol):
    """The four remote primitives discovery is built on."""

    async def latest_height(self) -> int: ...

    async def block_at(self, height: int) -> Block | None: ...

    async def signatures_before(
        self, identifier: str, cursor: str | None = None, limit: int = 1000
    ) -> list[SignatureInfo]: ...

    async def transaction_by(self, signature: str) -> TransactionInfo | None: ...


class _TokenBucket:
    def __init__(self, rate_per_sec: float) -> None:
        self.rate = max(rate_per_sec, 0.001)
        self.capacity = 1.0
        self.tokens = 1.0
        self.updated_at = time.monotonic()
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        async with self._lock:
            now = time.monotonic()
            elapsed = now - self.updated_at
            self.updated_at = now
            self.tokens = min(self.capacity, self.tokens + elapsed * self.rate)
            if self.tokens >= 1.0:
                self.tokens -= 1.0
                return
            needed = 1.0 - self.tokens
            wait_s = needed / self.rate
        await asyncio.sleep(wait_s)
        await self.acquire()


class SolanaRpcClient:
    """One endpoint. Use as ``async with SolanaRpcClient(url) as rpc: ...``."""

    def __init__(
        self,
        url: str,
        *,
        timeout_s: float = 30.0,
        rate_limit_rps: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self._bucket = _TokenBucket(rate_limit_rps) if rate_limit_rps else None
        self._client = httpx.AsyncClient(timeout=timeout_s, transport=transport)
        self._ids = itertools.count(1)

    async def __aenter__(self) -> SolanaRpcClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def call(self, method: str, params: list[Any] | None = None) -> Any:
        """Raw JSON-RPC call. Returns ``result``; raises TransientRpcError on any failure."""

        if self._bucket is not None:
            await self._bucket.acquire()

        payload: dict[str, Any] = {"jsonrpc": "2.0", "id": next(self._ids), "method": method}
        if params is not None:
            payload["params"] = params

        try:
            resp = await self._client.post(self.url, json=payload)
            resp.raise_for_status()
            out = resp.json()
        except httpx.HTTPStatusError as e:
            raise TransientRpcError(f"{method}: HTTP {e.response.status_code}", method=method) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransientRpcError(f"{method}: {type(e).__name__}: {e}", method=method) from e
        except ValueError as e:
            raise TransientRpcError(f"{method}: response is not JSON", method=method) from e

        if not isinstance(out, dict):
            raise TransientRpcError(f"{method}: unexpected response shape", method=method)

        err = out.get("error")
        if err is not None:
            code = err.get("code") if isinstance(err, dict) else None
            message = err.get("message") if isinstance(err, dict) else str(err)
            raise RpcResponseError(f"{method}: {message} (code {code})", code=code, method=method)

        if "result" not in out:
            raise TransientRpcError(f"{method}: response has no result", method=method)
        return out["result"]

    async def get_version(self) -> dict[str, Any]:
        result = await self.call("getVersion")
        if not isinstance(result, dict):
            raise TransientRpcError("getVersion: unexpected result", method="getVersion")
        return result

    async def latest_height(self) -> int:
        result = await self.call("getSlot", [{"commitment": "finalized"}])
        if not isinstance(result, int):
            raise TransientRpcError("getSlot: unexpected result", method="getSlot")
        return result

    async def block_at(self, height: int) -> Block | None:
        try:
            result = await self.call(
                "getBlock",
                [
                    int(height),
                    {
                        "encoding": "json",
                        "maxSupportedTransactionVersion": 0,
                        "transactionDetails": "signatures",
                        "rewards": False,
                    },
                ],
            )
        except RpcResponseError as e:
            if e.code in ABSENT_BLOCK_CODES:
                return None
            raise

        if result is None:
            return None
        if not isinstance(result, dict):
            raise TransientRpcError("getBlock: unexpected result", method="getBlock")
        return Block(
            height=int(height),
            signatures=_block_signatures(result),
            block_time=result.get("blockTime"),
        )

    async def signatures_before(
        self, identifier: str, cursor: str | None = None, limit: int = 1000
    ) -> list[SignatureInfo]:
        opts: dict[str, Any] = {"limit": int(limit)}
        if cursor is not None:
            opts["before"] = cursor
        result = await self.call("getSignaturesForAddress", [identifier, opts])
        if not isinstance(result, list):
            raise TransientRpcError(
                "getSignaturesForAddress: unexpected result", method="getSignaturesForAddress"
            )
        return [
            SignatureInfo(
                signature=str(row["signature"]),
                slot=row.get("slot"),
                block_time=row.get("blockTime"),
                failed=row.get("err") is not None,
            )
            for row in result
            if isinstance(row, dict) and row.get("signature")
        ]

    async def transaction_by(self, signature: str) -> TransactionInfo | None:
        result = await self.call(
            "getTransaction",
            [signature, {"encoding": "json", "maxSupportedTransactionVersion": 0}],
        )
        if result is None:
            return None
        if not isinstance(result, dict):
            raise TransientRpcError("getTransaction: unexpected result", method="getTransaction")
        return TransactionInfo(
            signature=signature,
            slot=result.get("slot"),
            block_time=result.get("blockTime"),
        )


def _block_signatures(result: dict[str, Any]) -> tuple[str, ...]:
    """First signature of each transaction, for either ``transactionDetails`` shape."""

    sigs = result.get("signatures")
    if isinstance(sigs, list):
        return tuple(str(s) for s in sigs if s)

    out: list[str] = []
    for tx in result.get("transactions") or []:
        inner = tx.get("transaction") if isinstance(tx, dict) else None
        tx_sigs = inner.get("signatures") if isinstance(inner, dict) else None
        if tx_sigs:
            out.append(str(tx_sigs[0]))
    return tuple(out)
