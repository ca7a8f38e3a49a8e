"""
Device Signing (RSA-4096-PSS)
=============================

Device authentication and backup-integrity signatures.

- RSA-4096 key pairs, generated independently of the HKDF hierarchy
- PSS padding, MGF1-SHA256, 32-byte salt, SHA-256
- Devices sign the SHA-256 digest of a backup ciphertext before upload
- The server verifies with the device's registered public key

verify() returns a bool instead of raising on a bad signature, so callers can
treat "invalid" as data rather than control flow.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Union

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from .aead import EncryptedData
from .errors import SignatureError

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

RSA_KEY_SIZE = 4096
RSA_PUBLIC_EXPONENT = 65537
PSS_SALT_LENGTH = 32

_KEY_MATCH_PROBE = b"ZKEB-RSA-KEYPAIR-CHECK"


def _pss() -> padding.PSS:
    return padding.PSS(mgf=padding.MGF1(hashes.SHA256()), salt_length=PSS_SALT_LENGTH)


# =============================================================================
# Key Types
# =============================================================================

@dataclass
class RSAKeyPair:
    """RSA key pair; the private key never leaves the device."""
    public_key: rsa.RSAPublicKey
    private_key: rsa.RSAPrivateKey = field(repr=False)


@dataclass
class ExportedKeyPair:
    """DER-encoded key pair: SPKI public key, PKCS#8 private key."""
    public_key: bytes
    private_key: bytes = field(repr=False)


# =============================================================================
# Key Generation
# =============================================================================

def generate_key_pair(
    key_size: int = RSA_KEY_SIZE,
    public_exponent: int = RSA_PUBLIC_EXPONENT,
) -> RSAKeyPair:
    """Generate a device signing key pair."""
    start = time.perf_counter()
    try:
        private_key = rsa.generate_private_key(
            public_exponent=public_exponent,
            key_size=key_size,
        )
    except ValueError as e:
        raise SignatureError(f"RSA key generation failed: {e}") from e

    logger.debug(f"Generated RSA-{key_size} key pair in {time.perf_counter() - start:.2f}s")
    return RSAKeyPair(public_key=private_key.public_key(), private_key=private_key)


# =============================================================================
# Sign / Verify
# =============================================================================

def sign(data: bytes, private_key: rsa.RSAPrivateKey) -> bytes:
    """
    Sign with RSA-PSS.

    PSS is randomized: signing the same data twice yields different
    signatures, all of which verify.
    """
    return private_key.sign(bytes(data), _pss(), hashes.SHA256())


def verify(data: bytes, signature: bytes, public_key: rsa.RSAPublicKey) -> bool:
    """True if ``signature`` is a valid PSS signature over ``data``."""
    try:
        public_key.verify(bytes(signature), bytes(data), _pss(), hashes.SHA256())
    except InvalidSignature:
        return False
    return True


# =============================================================================
# Export / Import
# =============================================================================

def export_public_key(public_key: rsa.RSAPublicKey) -> bytes:
    """SPKI (X.509 SubjectPublicKeyInfo) DER."""
    return public_key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


def export_private_key(private_key: rsa.RSAPrivateKey) -> bytes:
    """PKCS#8 DER, unencrypted. Keep it in secure storage only."""
    return private_key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


def export_key_pair(key_pair: RSAKeyPair) -> ExportedKeyPair:
    return ExportedKeyPair(
        public_key=export_public_key(key_pair.public_key),
        private_key=export_private_key(key_pair.private_key),
    )


def import_public_key(public_key_bytes: bytes) -> rsa.RSAPublicKey:
    """
    Load an SPKI DER public key.

    Raises:
        SignatureError: malformed input or not an RSA key
    """
    try:
        key = serialization.load_der_public_key(bytes(public_key_bytes))
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise SignatureError(f"Failed to import public key: {e}") from e
    if not isinstance(key, rsa.RSAPublicKey):
        raise SignatureError(f"Expected an RSA public key, got {type(key).__name__}")
    return key


def import_private_key(private_key_bytes: bytes) -> rsa.RSAPrivateKey:
    """
    Load a PKCS#8 DER private key.

    Raises:
        SignatureError: malformed input or not an RSA key
    """
    try:
        key = serialization.load_der_private_key(bytes(private_key_bytes), password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise SignatureError(f"Failed to import private key: {e}") from e
    if not isinstance(key, rsa.RSAPrivateKey):
        raise SignatureError(f"Expected an RSA private key, got {type(key).__name__}")
    return key


# =============================================================================
# Helpers
# =============================================================================

def get_modulus_length(key: Union[rsa.RSAPublicKey, rsa.RSAPrivateKey]) -> int:
    """Modulus size in bits of an RSA public or private key."""
    return key.key_size


def verify_key_pair_match(key_pair: RSAKeyPair) -> bool:
    """Sign a probe with the private key and verify it with the public key."""
    signature = sign(_KEY_MATCH_PROBE, key_pair.private_key)
    return verify(_KEY_MATCH_PROBE, signature, key_pair.public_key)


# =============================================================================
# Backup Signatures
# =============================================================================

def ciphertext_digest(encrypted: EncryptedData) -> bytes:
    """SHA-256 of the envelope ciphertext."""
    digest = hashes.Hash(hashes.SHA256())
    digest.update(bytes(encrypted.ciphertext))
    return digest.finalize()


def sign_ciphertext(encrypted: EncryptedData, private_key: rsa.RSAPrivateKey) -> bytes:
    """Sign the ciphertext digest of a backup envelope."""
    return sign(ciphertext_digest(encrypted), private_key)


def verify_ciphertext(
    encrypted: EncryptedData,
    signature: bytes,
    public_key: rsa.RSAPublicKey,
) -> bool:
    return verify(ciphertext_digest(encrypted), signature, public_key)
