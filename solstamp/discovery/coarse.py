"""solstamp.discovery.coarse

Coarse locator: binary search over heights for the leftmost height with evidence.

Evidence at height ``m`` means: take the signature of the last transaction in block ``m``
and ask for one signature of the program strictly before it. Any answer proves the
program was active at or before ``m``.

Known approximation: an absent or empty block counts as "no evidence", and the anchor
signature belongs to an arbitrary transaction of the block, not to the program. If all
evidence sits inside gaps this skips, the search can settle on a height later than the
true first occurrence. The fine locator only ever moves the answer earlier.
"""

from __future__ import annotations

from solstamp.core.types import CoarseResult, HeightProbeCache, HeightRange
from solstamp.discovery.base import DiscoveryContext


class CoarseLocator:
    def __init__(self, ctx: DiscoveryContext, identifier: str) -> None:
        self.ctx = ctx
        self.identifier = identifier
        self.probes = 0
        self._anchors: dict[int, str] = {}

    async def locate(
        self,
        height_range: HeightRange | None = None,
        cache: HeightProbeCache | None = None,
    ) -> CoarseResult | None:
        """Return the lowest height with evidence (and its anchor), or None.

        ``cache`` is owned by the caller and mutated in place.
        """

        if height_range is None:
            latest = await self.ctx.call("getSlot", self.ctx.transport.latest_height)
            if latest < 1:
                return None
            height_range = HeightRange(low=1, high=latest)

        cache = {} if cache is None else cache
        low, high = height_range.low, height_range.high
        best: CoarseResult | None = None

        while low <= high:
            mid = (low + high) // 2
            anchor = await self._evidence_at(mid, cache)
            if anchor is not None:
                best = CoarseResult(height=mid, signature=anchor)
                high = mid - 1
            else:
                low = mid + 1

        self.ctx.logger.debug(
            "coarse_done",
            extra={"identifier": self.identifier, "height": best.height if best else None, "probes": self.probes},
        )
        return best

    async def _evidence_at(self, height: int, cache: HeightProbeCache) -> str | None:
        cached = cache.get(height)
        if cached is False:
            return None
        if cached is True and height in self._anchors:
            return self._anchors[height]

        anchor = await self._probe(height)
        cache[height] = anchor is not None
        if anchor is not None:
            self._anchors[height] = anchor
        return anchor

    async def _probe(self, height: int) -> str | None:
        transport = self.ctx.transport
        self.probes += 1
        try:
            block = await self.ctx.call(f"getBlock({height})", lambda: transport.block_at(height))
            if block is None or not block.signatures:
                self.ctx.logger.debug("coarse_block_empty", extra={"height": height})
                return None

            anchor = block.signatures[-1]
            page = await self.ctx.call(
                f"getSignaturesForAddress(before@{height})",
                lambda: transport.signatures_before(self.identifier, anchor, 1),
            )
        except self.ctx.retry.retry_on as e:
            # no evidence, keep searching upward
            self.ctx.logger.warning("coarse_probe_failed", extra={"height": height, "error": str(e)})
            return None

        self.ctx.logger.debug("coarse_probe", extra={"height": height, "evidence": bool(page)})
        return anchor if page else None
