"""
Frozen Test Vectors
===================

- RFC 5869 Appendix A, SHA-256 cases (A.1 - A.3), plus longer and
  block-boundary outputs for the A.1 inputs
- The cross-platform hierarchy vector: UMK = 0x01 * 32,
  device_id = "test-device-id"

The hierarchy vector was established with an independent RFC 5869
implementation (OpenSSL ``kdf HKDF``). Every platform client must reproduce
it; never regenerate it from this package.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class HKDFVector:
    name: str
    ikm: str
    salt: str
    info: str
    length: int
    okm: str
    prk: str = ""


@dataclass(frozen=True)
class HierarchyVector:
    umk: str
    device_id: str
    dmk: str
    bek: str
    mek: str


_A1_IKM = "0b" * 22
_A1_SALT = "000102030405060708090a0b0c"
_A1_INFO = "f0f1f2f3f4f5f6f7f8f9"
_A1_PRK = "077709362c2e32df0ddc3f0dc47bba6390b6c73bb50f9c3122ec844ad7c2b3e5"
_A1_OKM_128 = (
    "3cb25f25faacd57a90434f64d0362f2a2d2d0a90cf1a5a4c5db02d56ecc4c5bf"
    "34007208d5b887185865b4b0a85a993b89b9b65683d60f0106d28fff039d0b6f"
    "3408900c0f2a9d4463de83622056be50a881bebf2b983ab43e069912f0a57582"
    "fcb18ca7a7fe40a33c766c829812af327c32e126589d3c64f419ddfff9d8c787"
)


RFC5869_VECTORS: List[HKDFVector] = [
    HKDFVector(
        name="A.1 basic",
        ikm=_A1_IKM,
        salt=_A1_SALT,
        info=_A1_INFO,
        length=42,
        prk=_A1_PRK,
        okm=_A1_OKM_128[:84],
    ),
    HKDFVector(
        name="A.2 long inputs",
        ikm=bytes(range(0x00, 0x50)).hex(),
        salt=bytes(range(0x60, 0xB0)).hex(),
        info=bytes(range(0xB0, 0x100)).hex(),
        length=82,
        prk="06a6b88c5853361a06104c9ceb35b45cef760014904671014a193f40c15fc244",
        okm=(
            "b11e398dc80327a1c8e7f78c596a49344f012eda2d4efad8a050cc4c19afa97c"
            "59045a99cac7827271cb41c65e590e09da3275600c2f09b8367793a9aca3db71"
            "cc30c58179ec3e87c14c01d5c1f3434f1d87"
        ),
    ),
    HKDFVector(
        name="A.3 zero-length salt and info",
        ikm=_A1_IKM,
        salt="",
        info="",
        length=42,
        prk="19ef24a32c717b167f33a91d6f648bdf96596776afdb6377ac434c1c293ccb04",
        okm=(
            "8da4e775a563c18f715f802a063c5a31b8a11f5c5ee1879ec3454e5f3c738d2d"
            "9d201395faa4b61a96c8"
        ),
    ),
    HKDFVector(name="A.1 inputs, 32 bytes", ikm=_A1_IKM, salt=_A1_SALT, info=_A1_INFO,
               length=32, prk=_A1_PRK, okm=_A1_OKM_128[:64]),
    HKDFVector(name="A.1 inputs, 33 bytes", ikm=_A1_IKM, salt=_A1_SALT, info=_A1_INFO,
               length=33, prk=_A1_PRK, okm=_A1_OKM_128[:66]),
    HKDFVector(name="A.1 inputs, 64 bytes", ikm=_A1_IKM, salt=_A1_SALT, info=_A1_INFO,
               length=64, prk=_A1_PRK, okm=_A1_OKM_128[:128]),
    HKDFVector(name="A.1 inputs, 128 bytes", ikm=_A1_IKM, salt=_A1_SALT, info=_A1_INFO,
               length=128, prk=_A1_PRK, okm=_A1_OKM_128),
]


CROSS_PLATFORM_VECTOR = HierarchyVector(
    umk="01" * 32,
    device_id="test-device-id",
    dmk="e149f44cabe9a87b41b077268464b0e52e6839a40df6d7eb5ad05bf14415b863",
    bek="0ab0b9c7b2d20408ff070bdffb1d1cfebe0def53d1483e40688290f1ed6edb7d",
    mek="5ddbcd125cdb79f4e6ee90c5ed5a83b1400b234aeec1be8e110edd54d9c0ca4d",
)
