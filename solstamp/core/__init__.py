"""solstamp.core

Core primitives: errors, types, config, retries.

If a module needs to exist, it should probably depend only on this package.
"""

from .config import Config
from .exceptions import (
    AllEndpointsExhaustedError,
    ConfigError,
    EndpointExhaustedError,
    InvalidIdentifierError,
    NoTimestampFoundError,
    SolstampError,
    TransientRpcError,
)
from .identifier import is_valid_program_id, validate_program_id
from .retry import ExponentialBackoff, FixedDelay, RetryPolicy, retry_call
from .types import DiscoveryOptions

__all__ = [
    "AllEndpointsExhaustedError",
    "Config",
    "ConfigError",
    "DiscoveryOptions",
    "EndpointExhaustedError",
    "ExponentialBackoff",
    "FixedDelay",
    "InvalidIdentifierError",
    "NoTimestampFoundError",
    "RetryPolicy",
    "SolstampError",
    "TransientRpcError",
    "is_valid_program_id",
    "retry_call",
    "validate_program_id",
]
