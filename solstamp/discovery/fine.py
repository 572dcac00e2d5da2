"""solstamp.discovery.fine

Fine locator: walk the program's signature history backwards until it runs out.

Pages come newest first, so the last entry of each page is the oldest seen so far and
becomes the cursor for the next request. The best timestamp only ever moves backward.
"""

from __future__ import annotations

from solstamp.core.types import SignatureInfo
from solstamp.discovery.base import DiscoveryContext

MAX_PAGE_LIMIT = 1000


def oldest_known_time(page: list[SignatureInfo]) -> int | None:
    """Block time of the oldest entry in ``page`` that has one."""

    for entry in reversed(page):
        if entry.block_time is not None:
            return int(entry.block_time)
    return None


class FineLocator:
    def __init__(self, ctx: DiscoveryContext, identifier: str, *, page_limit: int = MAX_PAGE_LIMIT) -> None:
        self.ctx = ctx
        self.identifier = identifier
        self.page_limit = page_limit
        self.pages = 0
        self.oldest_signature: str | None = None

    async def locate(self, cursor: str | None = None) -> int | None:
        """Earliest block time reachable from ``cursor`` (None = from the tip)."""

        transport = self.ctx.transport
        best: int | None = None
        oldest: SignatureInfo | None = None

        while True:
            before = cursor
            page = await self.ctx.call(
                "getSignaturesForAddress",
                lambda: transport.signatures_before(self.identifier, before, self.page_limit),
            )
            if not page:
                break

            self.pages += 1
            oldest = page[-1]
            ts = oldest_known_time(page)
            if ts is not None:
                best = ts if best is None else min(best, ts)

            self.ctx.logger.debug(
                "fine_page",
                extra={"page": self.pages, "size": len(page), "oldest": oldest.signature, "best": best},
            )

            if len(page) < self.page_limit:
                break
            if oldest.signature == before:
                self.ctx.logger.warning("fine_cursor_stuck", extra={"cursor": before})
                break
            cursor = oldest.signature

        if oldest is None:
            return best

        self.oldest_signature = oldest.signature
        if oldest.block_time is None:
            resolved = await self._resolve_block_time(oldest.signature)
            if resolved is not None:
                best = resolved if best is None else min(best, resolved)
            else:
                self.ctx.logger.warning(
                    "fine_oldest_without_block_time",
                    extra={"signature": oldest.signature, "fallback": best},
                )
        return best

    async def _resolve_block_time(self, signature: str) -> int | None:
        transport = self.ctx.transport
        try:
            tx = await self.ctx.call("getTransaction", lambda: transport.transaction_by(signature))
        except self.ctx.retry.retry_on as e:
            self.ctx.logger.warning("fine_transaction_lookup_failed", extra={"signature": signature, "error": str(e)})
            return None
        if tx is None or tx.block_time is None:
            return None
        return int(tx.block_time)
