"""solstamp — when did this program first show up on chain?

Given a Solana program id and a list of RPC endpoints, find the Unix timestamp of the
earliest transaction that referenced it.

The answer is never later than the first occurrence the ledger history exposes.
"""

from __future__ import annotations

__all__ = [
    "__version__",
    "PUBLIC_RPC_URL",
    "discover_first_timestamp",
]

__version__ = "1.0.0"

# Rate limited and history-pruned, but always there.
PUBLIC_RPC_URL = "https://api.mainnet-beta.solana.com"


def __getattr__(name: str):
    # Lazy: keep `import solstamp` free of httpx for the CLI parse path.
    if name == "discover_first_timestamp":
        from solstamp.discovery.orchestrator import discover_first_timestamp

        return discover_first_timestamp
    raise AttributeError(name)
