"""
ZKEB Crypto Errors
==================

Exception taxonomy for the key engine.

- HKDFError: bad HKDF parameters (output length, short PRK)
- KeyHierarchyError: invalid UMK / device id / DMK
- AESGCMError: envelope failures, including AuthenticationError
- RandomSourceError: the OS CSPRNG is unavailable (fatal)

Validation errors also subclass ValueError so callers that only care about
"bad input" can catch that.
"""


class ZKEBError(Exception):
    """Base class for every error raised by zkeb."""


# =============================================================================
# HKDF
# =============================================================================

class HKDFError(ZKEBError, ValueError):
    """Invalid HKDF input."""


class HKDFLengthError(HKDFError):
    """Requested output length is <= 0 or > 255 * HashLen."""


# =============================================================================
# Key Hierarchy
# =============================================================================

class KeyHierarchyError(ZKEBError, ValueError):
    """Invalid input to a key hierarchy derivation."""


class InvalidUMKError(KeyHierarchyError):
    pass


class InvalidDeviceIdError(KeyHierarchyError):
    pass


class InvalidDMKError(KeyHierarchyError):
    pass


# =============================================================================
# AES-GCM Envelope
# =============================================================================

class AESGCMError(ZKEBError):
    """Error raised by envelope encryption or decryption."""


class InvalidKeyLengthError(AESGCMError, ValueError):
    pass


class InvalidNonceLengthError(AESGCMError, ValueError):
    pass


class InvalidTagLengthError(AESGCMError, ValueError):
    pass


class AuthenticationError(AESGCMError):
    """
    Tag verification failed.

    Wrong key, wrong nonce, modified ciphertext/tag or mismatched associated
    data. Treat as an integrity incident, never as a retryable condition.
    """


class DecodeError(AESGCMError, ValueError):
    """Decrypted bytes are not valid UTF-8."""


# =============================================================================
# Other
# =============================================================================

class RandomSourceError(ZKEBError):
    """The secure randomness source is unavailable."""


class RecoveryError(ZKEBError, ValueError):
    """Invalid password-recovery parameters."""


class SignatureError(ZKEBError):
    """RSA key generation, import or export failed."""


class ConfigError(ZKEBError):
    """Configuration file could not be loaded or validated."""
