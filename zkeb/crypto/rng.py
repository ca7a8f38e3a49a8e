"""
Secure randomness.

All key, nonce and salt material comes from here. A missing OS entropy source
is fatal: the error propagates and no weaker generator is ever substituted.
"""

from __future__ import annotations

import secrets

from .errors import RandomSourceError


def random_bytes(n: int) -> bytes:
    """Return ``n`` bytes from the OS CSPRNG."""
    if n < 0:
        raise ValueError(f"byte count must be non-negative, got {n}")
    try:
        return secrets.token_bytes(n)
    except (NotImplementedError, OSError) as e:
        raise RandomSourceError("secure randomness source unavailable") from e
