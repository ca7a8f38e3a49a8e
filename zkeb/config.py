"""
ZKEB Configuration
==================

Tunables for the ambient layers (recovery, device signing, self-test,
logging). The HKDF hierarchy and AEAD envelope have no tunables: their sizes
and context strings are a fixed cross-platform contract.

Example zkeb.yaml:

    pbkdf2_iterations: 600000
    pbkdf2_salt_length: 16
    rsa_key_size: 4096
    self_test_samples: 256
    log_level: INFO

Config objects are passed explicitly; there is no process-wide instance.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .crypto.errors import ConfigError
from .crypto.recovery import (
    DEFAULT_ITERATIONS,
    MIN_PASSWORD_LENGTH,
    SALT_LENGTH,
    Password,
    PasswordDerivedKey,
    derive_key_from_password,
    generate_salt,
)
from .crypto.signing import RSA_KEY_SIZE, RSA_PUBLIC_EXPONENT, RSAKeyPair, generate_key_pair

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "ZKEB_CONFIG"

_ALLOWED_RSA_SIZES = (2048, 3072, 4096)
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class CryptoConfig(BaseModel):
    """Validated configuration."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    # Recovery
    pbkdf2_iterations: int = Field(default=DEFAULT_ITERATIONS, ge=1)
    pbkdf2_salt_length: int = Field(default=SALT_LENGTH, ge=8)
    min_password_length: int = Field(default=MIN_PASSWORD_LENGTH, ge=1)

    # Device signing
    rsa_key_size: int = RSA_KEY_SIZE
    rsa_public_exponent: int = RSA_PUBLIC_EXPONENT

    # Diagnostics
    self_test_samples: int = Field(default=256, ge=1)

    # Logging
    log_level: str = "INFO"

    @field_validator("rsa_key_size")
    @classmethod
    def _check_rsa_key_size(cls, v: int) -> int:
        if v not in _ALLOWED_RSA_SIZES:
            raise ValueError(f"rsa_key_size must be one of {_ALLOWED_RSA_SIZES}, got {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {LOG_LEVELS}, got {v!r}")
        return level

    def derive_recovery_key(
        self,
        password: Password,
        salt: Optional[bytes] = None,
    ) -> PasswordDerivedKey:
        """PBKDF2 recovery key using the configured iterations and salt length."""
        if salt is None:
            salt = generate_salt(self.pbkdf2_salt_length)
        return derive_key_from_password(
            password,
            salt,
            iterations=self.pbkdf2_iterations,
            min_password_length=self.min_password_length,
        )

    def generate_signing_key_pair(self) -> RSAKeyPair:
        """Device signing key pair with the configured modulus and exponent."""
        return generate_key_pair(
            key_size=self.rsa_key_size,
            public_exponent=self.rsa_public_exponent,
        )

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "CryptoConfig":
        """Load config from a YAML file."""
        path = Path(path)
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")

        try:
            config = cls(**data)
        except ValidationError as e:
            raise ConfigError(f"Invalid config in {path}: {e}") from e

        logger.info(f"Loaded config from {path}")
        return config


def load_config(path: Optional[Union[str, Path]] = None) -> CryptoConfig:
    """
    Resolve configuration.

    Order: explicit path, then $ZKEB_CONFIG, then defaults.
    """
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR) or None
    if path is None:
        logger.debug("No config file given, using defaults")
        return CryptoConfig()
    return CryptoConfig.from_yaml(path)
