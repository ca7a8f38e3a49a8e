"""
Zeroization helpers for caller-owned key buffers.

Python ``bytes`` are immutable, so a derived key returned as ``bytes`` cannot
be wiped. Callers that hold key material beyond a single call should copy it
into a mutable buffer and scope it:

    with secure_buffer(keys.backup_encryption_key) as bek:
        envelope = encrypt(payload, bek)
    # bek is all zeros here

This is best effort: it clears the buffer it owns, not copies made elsewhere.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Union


def wipe_bytes_like(buf: Union[bytes, bytearray, memoryview]) -> None:
    """
    Overwrite a mutable buffer with zeros in place.

    - bytearray / writable memoryview: zeroed
    - bytes / read-only memoryview: no-op
    """
    if isinstance(buf, bytearray):
        buf[:] = bytes(len(buf))
    elif isinstance(buf, memoryview) and not buf.readonly:
        buf.cast("B")[:] = bytes(buf.nbytes)


@contextmanager
def secure_buffer(data: Union[bytes, bytearray, memoryview]) -> Iterator[bytearray]:
    """Yield a mutable copy of ``data`` that is wiped on exit."""
    buf = bytearray(data)
    try:
        yield buf
    finally:
        wipe_bytes_like(buf)
