"""
HKDF (RFC 5869)
===============

HMAC-based Extract-and-Expand Key Derivation Function over SHA-256.

    PRK = HMAC-Hash(salt, IKM)
    T(0) = empty
    T(i) = HMAC-Hash(PRK, T(i-1) | info | i)      i = 1..N
    OKM  = first L octets of T(1) | ... | T(N)

This composition is the only bespoke piece of cryptography in zkeb. The HMAC
itself comes from the ``cryptography`` package.

Properties:
- Deterministic: same inputs, same output
- Prefix: hkdf(..., L) is a prefix of hkdf(..., L + k)
- Stateless: safe to call from any number of threads
"""

from __future__ import annotations

from typing import Union

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives import hmac as crypto_hmac

from .errors import HKDFError, HKDFLengthError

BytesLike = Union[bytes, bytearray, memoryview]


# =============================================================================
# Constants
# =============================================================================

HASH_LENGTH = 32  # SHA-256 output size
MAX_OUTPUT_LENGTH = 255 * HASH_LENGTH  # 8160 bytes; block counter is one octet


# =============================================================================
# Helpers
# =============================================================================

def _as_bytes(value: BytesLike, name: str) -> bytes:
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise TypeError(f"{name} must be bytes-like, got {type(value).__name__}")
    return bytes(value)


def _hmac_sha256(key: bytes, data: bytes) -> bytes:
    h = crypto_hmac.HMAC(key, hashes.SHA256())
    h.update(data)
    return h.finalize()


def _check_length(length: int) -> None:
    if isinstance(length, bool) or not isinstance(length, int):
        raise TypeError(f"length must be int, got {type(length).__name__}")
    if length <= 0:
        raise HKDFLengthError(f"HKDF: output length must be positive, got {length}")
    if length > MAX_OUTPUT_LENGTH:
        raise HKDFLengthError(
            f"HKDF: output length too long (max {MAX_OUTPUT_LENGTH} bytes for SHA-256), "
            f"got {length}"
        )


# =============================================================================
# Extract / Expand
# =============================================================================

def hkdf_extract(salt: BytesLike, ikm: BytesLike) -> bytes:
    """
    HKDF-Extract (RFC 5869 §2.2).

    A zero-length salt is replaced by HashLen zero bytes.

    Returns:
        32-byte pseudorandom key
    """
    salt_bytes = _as_bytes(salt, "salt")
    ikm_bytes = _as_bytes(ikm, "ikm")

    if not salt_bytes:
        salt_bytes = b"\x00" * HASH_LENGTH

    return _hmac_sha256(salt_bytes, ikm_bytes)


def hkdf_expand(prk: BytesLike, info: BytesLike, length: int) -> bytes:
    """
    HKDF-Expand (RFC 5869 §2.3).

    Args:
        prk: Pseudorandom key, at least HashLen bytes (normally from hkdf_extract)
        info: Context binding; distinct values give independent outputs
        length: Output length, 1..8160

    Raises:
        HKDFLengthError: length out of range
        HKDFError: prk shorter than HashLen
    """
    _check_length(length)
    prk_bytes = _as_bytes(prk, "prk")
    info_bytes = _as_bytes(info, "info")

    if len(prk_bytes) < HASH_LENGTH:
        raise HKDFError(
            f"HKDF: PRK must be at least {HASH_LENGTH} bytes, got {len(prk_bytes)}"
        )

    n = -(-length // HASH_LENGTH)
    okm = bytearray()
    block = b""
    for i in range(1, n + 1):
        block = _hmac_sha256(prk_bytes, block + info_bytes + bytes([i]))
        okm += block

    return bytes(okm[:length])


def hkdf(salt: BytesLike, ikm: BytesLike, info: BytesLike, length: int) -> bytes:
    """
    Extract-then-Expand.

    Example:
        >>> okm = hkdf(b"", b"\\x0b" * 22, b"", 42)
        >>> okm.hex()[:16]
        '8da4e775a563c18f'
    """
    # Validate everything up front so no HMAC runs for a rejected call
    _check_length(length)
    _as_bytes(info, "info")
    prk = hkdf_extract(salt, ikm)
    return hkdf_expand(prk, info, length)
