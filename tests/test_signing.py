#!/usr/bin/env python3
"""
test_signing.py - RSA-4096-PSS device signatures

RSA-4096 generation takes around a second, so key pairs come from
session-scoped fixtures in conftest.py.

Run with: pytest tests/test_signing.py -v
"""

import hashlib
import os
from dataclasses import replace

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from zkeb.crypto import signing
from zkeb.crypto.aead import encrypt
from zkeb.crypto.errors import SignatureError

pytestmark = pytest.mark.slow


def _flip_bit(data: bytes, bit: int) -> bytes:
    buf = bytearray(data)
    buf[bit // 8] ^= 1 << (bit % 8)
    return bytes(buf)


# =============================================================================
# Key Generation
# =============================================================================

class TestKeyGeneration:

    def test_modulus_length(self, rsa_key_pair):
        assert signing.get_modulus_length(rsa_key_pair.public_key) == 4096
        assert signing.get_modulus_length(rsa_key_pair.private_key) == 4096

    def test_key_pair_matches(self, rsa_key_pair):
        assert signing.verify_key_pair_match(rsa_key_pair)

    def test_mismatched_pair(self, rsa_key_pair, other_rsa_key_pair):
        mixed = signing.RSAKeyPair(
            public_key=other_rsa_key_pair.public_key,
            private_key=rsa_key_pair.private_key,
        )
        assert not signing.verify_key_pair_match(mixed)

    def test_unique_pairs(self, rsa_key_pair, other_rsa_key_pair):
        a = signing.export_key_pair(rsa_key_pair)
        b = signing.export_key_pair(other_rsa_key_pair)
        assert a.public_key != b.public_key
        assert a.private_key != b.private_key

    def test_rejects_bad_key_size(self):
        with pytest.raises(SignatureError):
            signing.generate_key_pair(key_size=512)

    def test_repr_hides_private_key(self, rsa_key_pair):
        exported = signing.export_key_pair(rsa_key_pair)
        assert "private_key" not in repr(rsa_key_pair)
        assert "private_key" not in repr(exported)


# =============================================================================
# Sign / Verify
# =============================================================================

class TestSignVerify:

    def test_round_trip(self, rsa_key_pair):
        data = hashlib.sha256(b"backup payload").digest()
        signature = signing.sign(data, rsa_key_pair.private_key)
        assert len(signature) == 512
        assert signing.verify(data, signature, rsa_key_pair.public_key)

    def test_pss_is_randomized(self, rsa_key_pair):
        data = b"same data"
        s1 = signing.sign(data, rsa_key_pair.private_key)
        s2 = signing.sign(data, rsa_key_pair.private_key)
        assert s1 != s2
        assert signing.verify(data, s1, rsa_key_pair.public_key)
        assert signing.verify(data, s2, rsa_key_pair.public_key)

    def test_empty_data(self, rsa_key_pair):
        signature = signing.sign(b"", rsa_key_pair.private_key)
        assert signing.verify(b"", signature, rsa_key_pair.public_key)

    def test_large_data(self, rsa_key_pair):
        data = os.urandom(1024 * 1024)
        signature = signing.sign(data, rsa_key_pair.private_key)
        assert signing.verify(data, signature, rsa_key_pair.public_key)

    def test_tampered_data(self, rsa_key_pair):
        data = b"original data"
        signature = signing.sign(data, rsa_key_pair.private_key)
        assert not signing.verify(b"original datA", signature, rsa_key_pair.public_key)

    @pytest.mark.parametrize("bit", [0, 2048, 4095])
    def test_tampered_signature(self, rsa_key_pair, bit):
        data = b"original data"
        signature = signing.sign(data, rsa_key_pair.private_key)
        assert not signing.verify(data, _flip_bit(signature, bit), rsa_key_pair.public_key)

    def test_truncated_signature(self, rsa_key_pair):
        data = b"original data"
        signature = signing.sign(data, rsa_key_pair.private_key)
        assert not signing.verify(data, signature[:-1], rsa_key_pair.public_key)

    def test_wrong_public_key(self, rsa_key_pair, other_rsa_key_pair):
        data = b"original data"
        signature = signing.sign(data, rsa_key_pair.private_key)
        assert not signing.verify(data, signature, other_rsa_key_pair.public_key)


# =============================================================================
# Export / Import
# =============================================================================

class TestExportImport:

    def test_export_sizes(self, rsa_key_pair):
        exported = signing.export_key_pair(rsa_key_pair)
        assert len(exported.public_key) > 500
        assert len(exported.private_key) > 2350

    def test_public_key_round_trip(self, rsa_key_pair):
        imported = signing.import_public_key(signing.export_public_key(rsa_key_pair.public_key))
        signature = signing.sign(b"data", rsa_key_pair.private_key)
        assert signing.verify(b"data", signature, imported)

    def test_private_key_round_trip(self, rsa_key_pair):
        imported = signing.import_private_key(signing.export_private_key(rsa_key_pair.private_key))
        signature = signing.sign(b"data", imported)
        assert signing.verify(b"data", signature, rsa_key_pair.public_key)

    @pytest.mark.parametrize("blob", [b"", b"not a key", os.urandom(64)])
    def test_invalid_public_key(self, blob):
        with pytest.raises(SignatureError):
            signing.import_public_key(blob)

    @pytest.mark.parametrize("blob", [b"", b"not a key", os.urandom(64)])
    def test_invalid_private_key(self, blob):
        with pytest.raises(SignatureError):
            signing.import_private_key(blob)

    def test_rejects_non_rsa_keys(self):
        ec_key = ec.generate_private_key(ec.SECP256R1())
        public_der = ec_key.public_key().public_bytes(
            serialization.Encoding.DER,
            serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        private_der = ec_key.private_bytes(
            serialization.Encoding.DER,
            serialization.PrivateFormat.PKCS8,
            serialization.NoEncryption(),
        )
        with pytest.raises(SignatureError):
            signing.import_public_key(public_der)
        with pytest.raises(SignatureError):
            signing.import_private_key(private_der)


# =============================================================================
# Backup Signatures
# =============================================================================

class TestCiphertextSignatures:

    def test_digest_is_sha256_of_ciphertext(self, aes_key):
        envelope = encrypt(b"backup payload", aes_key)
        assert signing.ciphertext_digest(envelope) == hashlib.sha256(envelope.ciphertext).digest()

    def test_sign_and_verify_envelope(self, rsa_key_pair, aes_key):
        envelope = encrypt(b"backup payload", aes_key, b"backup-id:7")
        signature = signing.sign_ciphertext(envelope, rsa_key_pair.private_key)
        assert signing.verify_ciphertext(envelope, signature, rsa_key_pair.public_key)

    def test_tampered_envelope(self, rsa_key_pair, aes_key):
        envelope = encrypt(b"backup payload", aes_key)
        signature = signing.sign_ciphertext(envelope, rsa_key_pair.private_key)
        tampered = replace(envelope, ciphertext=_flip_bit(envelope.ciphertext, 3))
        assert not signing.verify_ciphertext(tampered, signature, rsa_key_pair.public_key)
