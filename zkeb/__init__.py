"""
ZKEB - Zero-Knowledge Encrypted Backup key engine
=================================================

One root secret per user; every other key is derived from it.

    UMK ──HKDF(device_id)──> DMK ──HKDF("backup")───> BEK ──┐
                                  └─HKDF("metadata")─> MEK ──┴─> AES-256-GCM envelope

The server only ever sees envelopes (ciphertext, nonce, tag, associated data).

Usage:
    from zkeb import generate_user_master_key, derive_keys_from_umk, encrypt, decrypt

    umk = generate_user_master_key()
    hierarchy = derive_keys_from_umk(umk, "device-123")
    envelope = encrypt(b"backup payload", hierarchy.keys.backup_encryption_key)
    payload = decrypt(envelope, hierarchy.keys.backup_encryption_key)
"""

from .crypto import (
    DeviceKeys,
    DeviceMasterKey,
    EncryptedData,
    KeyHierarchy,
    UserMasterKey,
    AuthenticationError,
    ZKEBError,
    decrypt,
    decrypt_string,
    derive_device_keys,
    derive_device_master_key,
    derive_keys_from_umk,
    encrypt,
    encrypt_string,
    generate_key,
    generate_nonce,
    generate_user_master_key,
    hkdf,
    hkdf_expand,
    hkdf_extract,
)
from .config import CryptoConfig, load_config

__version__ = "0.1.0"

__all__ = [
    # HKDF
    "hkdf",
    "hkdf_extract",
    "hkdf_expand",
    # Hierarchy
    "UserMasterKey",
    "DeviceMasterKey",
    "DeviceKeys",
    "KeyHierarchy",
    "generate_user_master_key",
    "derive_device_master_key",
    "derive_device_keys",
    "derive_keys_from_umk",
    # Envelope
    "EncryptedData",
    "encrypt",
    "decrypt",
    "encrypt_string",
    "decrypt_string",
    "generate_key",
    "generate_nonce",
    # Errors
    "ZKEBError",
    "AuthenticationError",
    # Config
    "CryptoConfig",
    "load_config",
]
