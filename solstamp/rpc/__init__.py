"""solstamp.rpc

Remote side: the JSON-RPC transport and the reachability probe.
"""

from .client import RpcTransport, SolanaRpcClient
from .health import check_endpoint, filter_reachable

__all__ = [
    "RpcTransport",
    "SolanaRpcClient",
    "check_endpoint",
    "filter_reachable",
]
