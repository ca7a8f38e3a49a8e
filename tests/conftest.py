"""
ZKEB Test Configuration
=======================

pytest markers and shared key fixtures.
"""

import os
import sys

import pytest

# Add repo root for imports when the package is not installed
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from zkeb.crypto.hierarchy import UserMasterKey
from zkeb.crypto import signing


# =============================================================================
# Pytest Markers
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: tests that take >1s to run (RSA-4096 keygen)")


# =============================================================================
# Key Fixtures
# =============================================================================

@pytest.fixture
def fixed_umk():
    """Cross-platform vector UMK (0x01 * 32)."""
    return UserMasterKey(key=b"\x01" * 32)


@pytest.fixture
def random_umk():
    return UserMasterKey(key=os.urandom(32))


@pytest.fixture
def aes_key():
    return os.urandom(32)


@pytest.fixture(scope="session")
def rsa_key_pair():
    """One RSA-4096 key pair for the whole session (generation is slow)."""
    return signing.generate_key_pair()


@pytest.fixture(scope="session")
def other_rsa_key_pair():
    return signing.generate_key_pair()
