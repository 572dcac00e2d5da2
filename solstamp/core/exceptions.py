"""solstamp.core.exceptions

Errors are part of the interface.

Per-call failures stay inside the retry wrapper, per-endpoint failures stay inside the
orchestrator. Only the aggregate failure (or a bad identifier) reaches the caller.
"""

from __future__ import annotations


class SolstampError(Exception):
    """Base exception for solstamp."""


class ConfigError(SolstampError):
    """Configuration is missing, invalid, or inconsistent."""


class InvalidIdentifierError(SolstampError, ValueError):
    """Program id is not a base58 string decoding to exactly 32 bytes.

    Fatal. Switching endpoints will not fix it.
    """

    def __init__(self, identifier: object) -> None:
        super().__init__(f"Invalid program ID: {identifier!r}")
        self.identifier = identifier


class TransientRpcError(SolstampError):
    """A single remote call failed: network, HTTP status, or malformed response."""

    def __init__(self, message: str, *, method: str | None = None) -> None:
        super().__init__(message)
        self.method = method


class RpcResponseError(TransientRpcError):
    """The endpoint answered with a JSON-RPC error object."""

    def __init__(self, message: str, *, code: int | None = None, method: str | None = None) -> None:
        super().__init__(message, method=method)
        self.code = code


class EndpointExhaustedError(SolstampError):
    """Retries for a call were used up on one endpoint."""

    def __init__(self, endpoint: str, cause: BaseException) -> None:
        super().__init__(f"{endpoint}: {cause}")
        self.endpoint = endpoint


class NoTimestampFoundError(SolstampError):
    """The search finished without a transaction carrying a block time."""


class AllEndpointsExhaustedError(SolstampError):
    """Every configured endpoint failed."""

    def __init__(self, last_error: BaseException | None) -> None:
        detail = str(last_error) if last_error is not None and str(last_error) else "Unknown error"
        super().__init__(f"Failed to get timestamp using all configured RPC URLs: {detail}")
        self.last_error = last_error
