"""solstamp.core.types

Lightweight dataclasses for the discovery hot path.

Pydantic models own config IO; dataclasses keep runtime lean.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

Strategy = Literal["combined", "pagination"]

# height -> "program has a transaction at or before this height"
HeightProbeCache = dict[int, bool]


@dataclass(frozen=True, slots=True)
class Endpoint:
    url: str
    priority: int


@dataclass(frozen=True, slots=True)
class HeightRange:
    """Inclusive bounds. Height 0 is genesis and never searched."""

    low: int
    high: int

    def __post_init__(self) -> None:
        if self.low < 1:
            raise ValueError(f"low must be >= 1, got {self.low}")

    @property
    def is_empty(self) -> bool:
        return self.low > self.high


@dataclass(frozen=True, slots=True)
class Block:
    height: int
    signatures: tuple[str, ...]  # first signature of each transaction, block order
    block_time: int | None = None


@dataclass(frozen=True, slots=True)
class SignatureInfo:
    signature: str
    slot: int | None = None
    block_time: int | None = None
    failed: bool = False


@dataclass(frozen=True, slots=True)
class TransactionInfo:
    signature: str
    slot: int | None = None
    block_time: int | None = None


@dataclass(frozen=True, slots=True)
class CoarseResult:
    height: int
    signature: str  # anchor signature that proved evidence at `height`


@dataclass(frozen=True, slots=True)
class DiscoveryOptions:
    max_retries: int = 3
    retry_delay_ms: int = 1000
    page_limit: int = 1000
    strategy: Strategy = "combined"
    min_coarse_height: int = 1024

    def __post_init__(self) -> None:
        if self.max_retries < 1:
            raise ValueError("max_retries must be >= 1")
        if self.retry_delay_ms < 0:
            raise ValueError("retry_delay_ms must be >= 0")
        if not 1 <= self.page_limit <= 1000:
            raise ValueError("page_limit must be within 1..1000")
