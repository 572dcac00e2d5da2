"""solstamp.core.identifier

Program ids are ed25519 public keys: 32 bytes, base58 on the wire.
"""

from __future__ import annotations

import re

import base58

from solstamp.core.exceptions import InvalidIdentifierError

PUBKEY_BYTES = 32

_BASE58_RE = re.compile(r"^[1-9A-HJ-NP-Za-km-z]+$")


def is_valid_program_id(value: object) -> bool:
    """Return True iff ``value`` is a base58 string decoding to exactly 32 bytes."""

    if not isinstance(value, str) or not value:
        return False
    if not _BASE58_RE.match(value):
        return False
    try:
        decoded = base58.b58decode(value)
    except ValueError:
        return False
    return len(decoded) == PUBKEY_BYTES


def validate_program_id(value: object) -> str:
    if not is_valid_program_id(value):
        raise InvalidIdentifierError(value)
    assert isinstance(value, str)
    return value
