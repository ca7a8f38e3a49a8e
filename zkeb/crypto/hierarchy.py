"""
Key Hierarchy
=============

Three-tier deterministic key derivation:

    UMK (User Master Key, 32 random bytes, never leaves the client)
      └─ DMK (Device Master Key)   HKDF(salt=device_id, ikm=UMK, info="ZKEB-DMK-v1")
          ├─ BEK (Backup Enc Key)  HKDF(salt="backup",   ikm=DMK, info="ZKEB-BEK-v1")
          └─ MEK (Metadata Key)    HKDF(salt="metadata", ikm=DMK, info="ZKEB-MEK-v1")

Context strings and salts must match every other platform client byte for
byte. Every call recomputes from its inputs; nothing is cached here, so key
lifetime is entirely the caller's business.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Type, Union

from .errors import (
    InvalidDeviceIdError,
    InvalidDMKError,
    InvalidUMKError,
    KeyHierarchyError,
)
from .hkdf import hkdf
from .rng import random_bytes


# =============================================================================
# Constants
# =============================================================================

KEY_LENGTH = 32

CONTEXT_DMK = "ZKEB-DMK-v1"
CONTEXT_BEK = "ZKEB-BEK-v1"
CONTEXT_MEK = "ZKEB-MEK-v1"

SALT_BACKUP = "backup"
SALT_METADATA = "metadata"


# =============================================================================
# Key Types
# =============================================================================

@dataclass(frozen=True)
class UserMasterKey:
    """Root of trust. Store it securely and never transmit it."""
    key: bytes = field(repr=False)


@dataclass(frozen=True)
class DeviceMasterKey:
    """Per-device key derived from the UMK."""
    key: bytes = field(repr=False)
    device_id: str = ""


@dataclass(frozen=True)
class DeviceKeys:
    """Purpose-specific keys derived from a DMK."""
    backup_encryption_key: bytes = field(repr=False)
    metadata_encryption_key: bytes = field(repr=False)


@dataclass(frozen=True)
class KeyHierarchy:
    """Result of derive_keys_from_umk."""
    dmk: DeviceMasterKey
    keys: DeviceKeys


UMKLike = Union[UserMasterKey, bytes, bytearray, memoryview]
DMKLike = Union[DeviceMasterKey, bytes, bytearray, memoryview]


# =============================================================================
# Validation
# =============================================================================

def _key_material(
    value: object,
    wrapper: type,
    label: str,
    error: Type[KeyHierarchyError],
) -> bytes:
    if isinstance(value, wrapper):
        value = value.key
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise error(f"Invalid {label}: expected {KEY_LENGTH} bytes, got {type(value).__name__}")
    raw = bytes(value)
    if len(raw) != KEY_LENGTH:
        raise error(f"Invalid {label}: expected {KEY_LENGTH} bytes, got {len(raw)} bytes")
    return raw


def _validate_device_id(device_id: object) -> str:
    if not isinstance(device_id, str):
        raise InvalidDeviceIdError(
            f"Device ID must be a string, got {type(device_id).__name__}"
        )
    if not device_id.strip():
        raise InvalidDeviceIdError("Device ID cannot be empty")
    return device_id


# =============================================================================
# Derivation
# =============================================================================

def generate_user_master_key() -> UserMasterKey:
    """
    Generate a new 256-bit UMK.

    Raises:
        RandomSourceError: the OS CSPRNG is unavailable
    """
    return UserMasterKey(key=random_bytes(KEY_LENGTH))


def derive_device_master_key(umk: UMKLike, device_id: str) -> DeviceMasterKey:
    """
    Derive the DMK for one device.

    The same UMK and device id always give the same DMK; different device ids
    give independent DMKs.

    Args:
        umk: UserMasterKey or raw 32-byte key
        device_id: Opaque device identifier, non-empty after trimming. The
            untrimmed string is what gets hashed.

    Raises:
        InvalidUMKError: umk is not 32 bytes
        InvalidDeviceIdError: device_id is empty or whitespace
    """
    umk_bytes = _key_material(umk, UserMasterKey, "UMK", InvalidUMKError)
    device_id = _validate_device_id(device_id)

    dmk = hkdf(
        device_id.encode("utf-8"),
        umk_bytes,
        CONTEXT_DMK.encode("utf-8"),
        KEY_LENGTH,
    )
    return DeviceMasterKey(key=dmk, device_id=device_id)


def derive_device_keys(dmk: DMKLike) -> DeviceKeys:
    """
    Derive BEK and MEK from a DMK.

    Distinct salts and contexts make the two keys independent; BEK != MEK.

    Raises:
        InvalidDMKError: dmk is not 32 bytes
    """
    dmk_bytes = _key_material(dmk, DeviceMasterKey, "DMK", InvalidDMKError)

    bek = hkdf(
        SALT_BACKUP.encode("utf-8"),
        dmk_bytes,
        CONTEXT_BEK.encode("utf-8"),
        KEY_LENGTH,
    )
    mek = hkdf(
        SALT_METADATA.encode("utf-8"),
        dmk_bytes,
        CONTEXT_MEK.encode("utf-8"),
        KEY_LENGTH,
    )
    return DeviceKeys(backup_encryption_key=bek, metadata_encryption_key=mek)


def derive_keys_from_umk(umk: UMKLike, device_id: str) -> KeyHierarchy:
    """Derive DMK, BEK and MEK for a device in one call."""
    dmk = derive_device_master_key(umk, device_id)
    return KeyHierarchy(dmk=dmk, keys=derive_device_keys(dmk))
