"""
ZKEB Crypto
===========

Client-side key engine.

Key Hierarchy:
- UMK: User Master Key, 32 random bytes, root of trust (never leaves device)
- DMK: Device Master Key, HKDF(UMK, device_id)
- BEK / MEK: Backup and Metadata Encryption Keys, HKDF(DMK)

Envelope:
- AES-256-GCM with a fresh 96-bit nonce per message

Recovery and device signing (PBKDF2, RSA-4096-PSS) sit alongside the
hierarchy and do not derive from it.
"""

from .aead import (
    EncryptedData,
    decrypt,
    decrypt_string,
    encrypt,
    encrypt_string,
    generate_key,
    generate_nonce,
    unwrap_key,
    wrap_key,
)
from .errors import (
    AESGCMError,
    AuthenticationError,
    ConfigError,
    DecodeError,
    HKDFError,
    HKDFLengthError,
    InvalidDeviceIdError,
    InvalidDMKError,
    InvalidKeyLengthError,
    InvalidNonceLengthError,
    InvalidTagLengthError,
    InvalidUMKError,
    KeyHierarchyError,
    RandomSourceError,
    RecoveryError,
    SignatureError,
    ZKEBError,
)
from .hierarchy import (
    DeviceKeys,
    DeviceMasterKey,
    KeyHierarchy,
    UserMasterKey,
    derive_device_keys,
    derive_device_master_key,
    derive_keys_from_umk,
    generate_user_master_key,
)
from .hkdf import hkdf, hkdf_expand, hkdf_extract
from .recovery import (
    PasswordDerivedKey,
    derive_key_from_password,
    generate_salt,
    unwrap_user_master_key,
    verify_password,
    wrap_user_master_key,
)
from .zeroize import secure_buffer, wipe_bytes_like

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
    # AEAD
    "EncryptedData",
    "encrypt",
    "decrypt",
    "encrypt_string",
    "decrypt_string",
    "generate_key",
    "generate_nonce",
    "wrap_key",
    "unwrap_key",
    # Recovery
    "PasswordDerivedKey",
    "derive_key_from_password",
    "verify_password",
    "generate_salt",
    "wrap_user_master_key",
    "unwrap_user_master_key",
    # Zeroization
    "wipe_bytes_like",
    "secure_buffer",
    # Errors
    "ZKEBError",
    "HKDFError",
    "HKDFLengthError",
    "KeyHierarchyError",
    "InvalidUMKError",
    "InvalidDeviceIdError",
    "InvalidDMKError",
    "AESGCMError",
    "InvalidKeyLengthError",
    "InvalidNonceLengthError",
    "InvalidTagLengthError",
    "AuthenticationError",
    "DecodeError",
    "RandomSourceError",
    "RecoveryError",
    "SignatureError",
    "ConfigError",
]
