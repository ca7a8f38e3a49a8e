"""
Diagnostics
===========

Runtime self-test for the key engine:

- Frozen vectors: RFC 5869 cases and the cross-platform hierarchy vector
- Avalanche: flipping one UMK bit should flip ~50% of DMK bits
- Nonce freshness: N generated nonces are pairwise distinct
- Key separation: BEK != MEK

Avalanche probes use numpy's seeded generator for reproducible inputs. Those
inputs are test data, never key material.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np

from .crypto.aead import generate_nonce
from .crypto.hierarchy import derive_device_master_key, derive_keys_from_umk
from .crypto.hkdf import hkdf, hkdf_extract
from .vectors import CROSS_PLATFORM_VECTOR, RFC5869_VECTORS

logger = logging.getLogger(__name__)

AVALANCHE_MIN = 0.45
AVALANCHE_MAX = 0.55
AVALANCHE_DEVICE_ID = "avalanche-probe"


# =============================================================================
# Measurements
# =============================================================================

def bit_difference(a: bytes, b: bytes) -> int:
    """Number of differing bits between two equal-length byte strings."""
    if len(a) != len(b):
        raise ValueError(f"length mismatch: {len(a)} != {len(b)}")
    xa = np.frombuffer(bytes(a), dtype=np.uint8)
    xb = np.frombuffer(bytes(b), dtype=np.uint8)
    return int(np.unpackbits(np.bitwise_xor(xa, xb)).sum())


def avalanche_ratio(samples: int = 256, seed: Optional[int] = None) -> float:
    """Mean fraction of DMK bits flipped by a single-bit change in the UMK."""
    if samples < 1:
        raise ValueError(f"samples must be >= 1, got {samples}")
    rng = np.random.default_rng(seed)
    ratios = np.empty(samples, dtype=np.float64)

    for i in range(samples):
        umk = bytearray(rng.bytes(32))
        bit = int(rng.integers(0, 256))
        base = derive_device_master_key(bytes(umk), AVALANCHE_DEVICE_ID).key
        umk[bit // 8] ^= 1 << (bit % 8)
        flipped = derive_device_master_key(bytes(umk), AVALANCHE_DEVICE_ID).key
        ratios[i] = bit_difference(base, flipped) / (len(base) * 8)

    return float(ratios.mean())


def nonce_collisions(count: int = 10_000) -> int:
    """How many of ``count`` fresh nonces repeat an earlier one."""
    seen = {generate_nonce() for _ in range(count)}
    return count - len(seen)


def check_vectors() -> List[str]:
    """Names of frozen vectors that do not reproduce; empty when all pass."""
    failures = []
    for v in RFC5869_VECTORS:
        okm = hkdf(bytes.fromhex(v.salt), bytes.fromhex(v.ikm), bytes.fromhex(v.info), v.length)
        if okm.hex() != v.okm:
            failures.append(v.name)
        elif v.prk and hkdf_extract(bytes.fromhex(v.salt), bytes.fromhex(v.ikm)).hex() != v.prk:
            failures.append(f"{v.name} (PRK)")

    cp = CROSS_PLATFORM_VECTOR
    result = derive_keys_from_umk(bytes.fromhex(cp.umk), cp.device_id)
    if (
        result.dmk.key.hex() != cp.dmk
        or result.keys.backup_encryption_key.hex() != cp.bek
        or result.keys.metadata_encryption_key.hex() != cp.mek
    ):
        failures.append("cross-platform hierarchy")
    return failures


# =============================================================================
# Report
# =============================================================================

@dataclass
class SelfTestReport:
    vector_failures: List[str] = field(default_factory=list)
    avalanche_ratio: float = 0.0
    nonce_samples: int = 0
    nonce_collisions: int = 0
    key_separation: bool = True

    @property
    def passed(self) -> bool:
        return (
            not self.vector_failures
            and AVALANCHE_MIN <= self.avalanche_ratio <= AVALANCHE_MAX
            and self.nonce_collisions == 0
            and self.key_separation
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["passed"] = self.passed
        return data


def run_self_test(
    samples: int = 256,
    nonce_samples: int = 10_000,
    seed: Optional[int] = None,
) -> SelfTestReport:
    """Run every check and collect the results."""
    cp = CROSS_PLATFORM_VECTOR
    keys = derive_keys_from_umk(bytes.fromhex(cp.umk), cp.device_id).keys

    report = SelfTestReport(
        vector_failures=check_vectors(),
        avalanche_ratio=avalanche_ratio(samples, seed),
        nonce_samples=nonce_samples,
        nonce_collisions=nonce_collisions(nonce_samples),
        key_separation=keys.backup_encryption_key != keys.metadata_encryption_key,
    )

    if report.passed:
        logger.info(f"Self-test passed (avalanche={report.avalanche_ratio:.4f})")
    else:
        logger.error(f"Self-test FAILED: {report.to_dict()}")
    return report
