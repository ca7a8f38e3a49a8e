"""
Password-Based Recovery
=======================

PBKDF2-HMAC-SHA256 recovery keys. Used only for account recovery: the
password-derived key wraps the UMK so a user who lost every device can
restore the hierarchy from a password.

    recovery_key = PBKDF2(password, salt, iterations=600_000, L=32)
    wrapped_umk  = AES-256-GCM(recovery_key, UMK, aad="ZKEB-UMK-WRAP-v1")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Optional, Union

from cryptography.hazmat.primitives import constant_time, hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .aead import EncryptedData, unwrap_key, wrap_key
from .errors import InvalidUMKError, RecoveryError
from .hierarchy import KEY_LENGTH, UMKLike, UserMasterKey, _key_material
from .rng import random_bytes

logger = logging.getLogger(__name__)

Password = Union[str, bytes, bytearray]


# =============================================================================
# Constants
# =============================================================================

DEFAULT_ITERATIONS = 600_000  # OWASP 2023 for PBKDF2-SHA256
SALT_LENGTH = 16
MIN_SALT_LENGTH = 8
MIN_PASSWORD_LENGTH = 12
UMK_WRAP_CONTEXT = b"ZKEB-UMK-WRAP-v1"


@dataclass(frozen=True)
class PasswordDerivedKey:
    """A recovery key plus the parameters needed to re-derive it."""
    key: bytes = field(repr=False)
    salt: bytes = b""
    iterations: int = DEFAULT_ITERATIONS


# =============================================================================
# PBKDF2
# =============================================================================

def generate_salt(length: int = SALT_LENGTH) -> bytes:
    """Random PBKDF2 salt; at least 8 bytes."""
    if length < MIN_SALT_LENGTH:
        raise RecoveryError(
            f"PBKDF2: salt must be at least {MIN_SALT_LENGTH} bytes, got {length}"
        )
    return random_bytes(length)


def _password_bytes(password: Password) -> bytes:
    if isinstance(password, str):
        password = password.encode("utf-8")
    if not isinstance(password, (bytes, bytearray)):
        raise TypeError(f"password must be str or bytes, got {type(password).__name__}")
    if len(password) == 0:
        raise RecoveryError("PBKDF2: password cannot be empty")
    return bytes(password)


def derive_key_from_password(
    password: Password,
    salt: Optional[bytes] = None,
    iterations: int = DEFAULT_ITERATIONS,
    min_password_length: int = MIN_PASSWORD_LENGTH,
) -> PasswordDerivedKey:
    """
    Derive a 32-byte recovery key from a password.

    Args:
        password: User password (str is UTF-8 encoded)
        salt: Stored salt; a new random one is generated when omitted
        iterations: PBKDF2 iteration count
        min_password_length: Shorter passwords are accepted with a warning

    Raises:
        RecoveryError: empty password or iterations < 1
    """
    password_bytes = _password_bytes(password)
    if len(password) < min_password_length:
        logger.warning(
            f"Recovery password is shorter than {min_password_length} characters"
        )
    if iterations < 1:
        raise RecoveryError(f"PBKDF2: iterations must be at least 1, got {iterations}")

    if salt is None:
        salt = generate_salt()
    salt = bytes(salt)
    if len(salt) < SALT_LENGTH:
        logger.warning(
            f"PBKDF2 salt is {len(salt)} bytes; shorter than {SALT_LENGTH} may reduce security"
        )

    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=iterations,
    )
    return PasswordDerivedKey(
        key=kdf.derive(password_bytes),
        salt=salt,
        iterations=iterations,
    )


def verify_password(
    password: Password,
    expected_key: bytes,
    salt: bytes,
    iterations: int = DEFAULT_ITERATIONS,
) -> bool:
    """Re-derive and compare in constant time."""
    derived = derive_key_from_password(password, salt, iterations)
    return constant_time.bytes_eq(derived.key, bytes(expected_key))


# =============================================================================
# UMK Wrapping
# =============================================================================

def _recovery_key_bytes(recovery_key: Union[PasswordDerivedKey, bytes]) -> bytes:
    if isinstance(recovery_key, PasswordDerivedKey):
        return recovery_key.key
    return bytes(recovery_key)


def wrap_user_master_key(
    umk: UMKLike,
    recovery_key: Union[PasswordDerivedKey, bytes],
) -> EncryptedData:
    """Encrypt the UMK under a recovery key."""
    umk_bytes = _key_material(umk, UserMasterKey, "UMK", InvalidUMKError)
    return wrap_key(_recovery_key_bytes(recovery_key), umk_bytes, UMK_WRAP_CONTEXT)


def unwrap_user_master_key(
    wrapped: EncryptedData,
    recovery_key: Union[PasswordDerivedKey, bytes],
) -> UserMasterKey:
    """
    Recover the UMK.

    Raises:
        AuthenticationError: wrong password/recovery key or tampered blob
        InvalidUMKError: the unwrapped key is not 32 bytes
    """
    # The wrap context is fixed, so it is re-attached if transport dropped it
    if wrapped.associated_data != UMK_WRAP_CONTEXT:
        wrapped = replace(wrapped, associated_data=UMK_WRAP_CONTEXT)
    raw = unwrap_key(_recovery_key_bytes(recovery_key), wrapped)
    return UserMasterKey(key=_key_material(raw, UserMasterKey, "UMK", InvalidUMKError))
