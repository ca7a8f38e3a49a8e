"""
AES-256-GCM Envelope
====================

Authenticated encryption for backup payloads and metadata.

Each call to encrypt() draws a fresh 96-bit nonce and returns an
EncryptedData bundle:

    ciphertext       same length as the plaintext
    nonce            12 bytes
    tag              16 bytes, covers ciphertext and associated_data
    associated_data  optional, carried in the clear but authenticated

The cipher and the tag check come from ``cryptography``'s AESGCM. Any tag
failure surfaces as AuthenticationError. How the bundle is serialized is up
to the transport layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .errors import (
    AuthenticationError,
    DecodeError,
    InvalidKeyLengthError,
    InvalidNonceLengthError,
    InvalidTagLengthError,
)
from .rng import random_bytes

BytesLike = Union[bytes, bytearray, memoryview]


# =============================================================================
# Constants
# =============================================================================

KEY_SIZE = 32  # 256 bits for AES-256
NONCE_SIZE = 12  # 96 bits for AES-GCM
TAG_SIZE = 16  # 128-bit GCM tag


# =============================================================================
# Envelope
# =============================================================================

@dataclass(frozen=True)
class EncryptedData:
    """Output of encrypt(); input to decrypt()."""
    ciphertext: bytes
    nonce: bytes
    tag: bytes
    associated_data: Optional[bytes] = field(default=None)


# =============================================================================
# Key / Nonce Generation
# =============================================================================

def generate_key() -> bytes:
    """Random 256-bit AES key."""
    return random_bytes(KEY_SIZE)


def generate_nonce() -> bytes:
    """
    Random 96-bit nonce.

    A nonce must never repeat under the same key. Random 96-bit nonces keep
    the collision probability negligible up to ~2^32 messages per key.
    """
    return random_bytes(NONCE_SIZE)


# =============================================================================
# Validation
# =============================================================================

def _is_bytes_like(value) -> bool:
    return isinstance(value, (bytes, bytearray, memoryview))


def _validate_key(key: BytesLike) -> bytes:
    if not _is_bytes_like(key):
        raise InvalidKeyLengthError(
            f"Invalid key length: expected {KEY_SIZE} bytes, got {type(key).__name__}"
        )
    raw = bytes(key)
    if len(raw) != KEY_SIZE:
        raise InvalidKeyLengthError(
            f"Invalid key length: expected {KEY_SIZE} bytes, got {len(raw)} bytes"
        )
    return raw


def _as_bytes(value: BytesLike, name: str) -> bytes:
    if not _is_bytes_like(value):
        raise TypeError(f"{name} must be bytes-like, got {type(value).__name__}")
    return bytes(value)


def _validate_nonce(nonce: BytesLike) -> bytes:
    if not _is_bytes_like(nonce):
        raise InvalidNonceLengthError(
            f"Invalid nonce: expected {NONCE_SIZE} bytes, got {type(nonce).__name__}"
        )
    raw = bytes(nonce)
    if len(raw) != NONCE_SIZE:
        raise InvalidNonceLengthError(
            f"Invalid nonce length: expected {NONCE_SIZE} bytes, got {len(raw)} bytes"
        )
    return raw


def _optional_bytes(value: Optional[BytesLike]) -> Optional[bytes]:
    return None if value is None else _as_bytes(value, "associated_data")


# =============================================================================
# AEAD Operations
# =============================================================================

def encrypt(
    plaintext: BytesLike,
    key: BytesLike,
    associated_data: Optional[BytesLike] = None,
) -> EncryptedData:
    """
    Encrypt with AES-256-GCM under a fresh random nonce.

    Raises:
        InvalidKeyLengthError: key is not 32 bytes
        TypeError: plaintext or associated_data is not bytes-like
        RandomSourceError: no nonce could be generated
    """
    key_bytes = _validate_key(key)
    data = _as_bytes(plaintext, "plaintext")
    aad = _optional_bytes(associated_data)
    nonce = generate_nonce()

    sealed = AESGCM(key_bytes).encrypt(nonce, data, aad)

    # AESGCM appends the tag to the ciphertext
    return EncryptedData(
        ciphertext=sealed[:-TAG_SIZE],
        nonce=nonce,
        tag=sealed[-TAG_SIZE:],
        associated_data=aad,
    )


def decrypt(encrypted: EncryptedData, key: BytesLike) -> bytes:
    """
    Verify and decrypt an envelope.

    The associated data carried in the envelope is used as-is; it must match
    what was supplied at encryption time.

    Raises:
        InvalidKeyLengthError / InvalidNonceLengthError / InvalidTagLengthError
        AuthenticationError: tag mismatch (wrong key, nonce or AAD, or tampering)
    """
    key_bytes = _validate_key(key)
    nonce = _validate_nonce(encrypted.nonce)
    if not _is_bytes_like(encrypted.tag):
        raise InvalidTagLengthError(
            f"Invalid tag: expected {TAG_SIZE} bytes, got {type(encrypted.tag).__name__}"
        )
    tag = bytes(encrypted.tag)
    if len(tag) != TAG_SIZE:
        raise InvalidTagLengthError(
            f"Invalid tag length: expected {TAG_SIZE} bytes, got {len(tag)} bytes"
        )

    try:
        return AESGCM(key_bytes).decrypt(
            nonce,
            _as_bytes(encrypted.ciphertext, "ciphertext") + tag,
            _optional_bytes(encrypted.associated_data),
        )
    except InvalidTag as e:
        raise AuthenticationError(
            "Decryption failed (authentication tag mismatch or corrupted data)"
        ) from e


def encrypt_string(
    plaintext: str,
    key: BytesLike,
    associated_data: Optional[BytesLike] = None,
) -> EncryptedData:
    """UTF-8 encode and encrypt."""
    return encrypt(plaintext.encode("utf-8"), key, associated_data)


def decrypt_string(encrypted: EncryptedData, key: BytesLike) -> str:
    """Decrypt and UTF-8 decode; DecodeError if the bytes are not UTF-8."""
    plaintext = decrypt(encrypted, key)
    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError("Decrypted data is not valid UTF-8") from e


# =============================================================================
# Key Wrapping
# =============================================================================

def wrap_key(
    kek: BytesLike,
    key_to_wrap: BytesLike,
    associated_data: Optional[BytesLike] = None,
) -> EncryptedData:
    """
    Wrap a key with a key-encrypting key (KEK).

    Uses AEAD so the wrapped key is authenticated.
    """
    return encrypt(key_to_wrap, kek, associated_data)


def unwrap_key(kek: BytesLike, wrapped: EncryptedData) -> bytes:
    """Unwrap a key using a KEK."""
    return decrypt(wrapped, kek)
