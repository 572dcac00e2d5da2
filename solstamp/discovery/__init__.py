"""solstamp.discovery

Two-phase search: bisect heights (coarse), then paginate history (fine), per endpoint.
"""

from .base import DiscoveryContext
from .coarse import CoarseLocator
from .fine import FineLocator
from .orchestrator import FailoverOrchestrator, discover_first_timestamp

__all__ = [
    "CoarseLocator",
    "DiscoveryContext",
    "FailoverOrchestrator",
    "FineLocator",
    "discover_first_timestamp",
]
