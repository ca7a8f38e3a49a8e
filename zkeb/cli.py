#!/usr/bin/env python3
"""
ZKEB CLI
========

Command-line access to the key engine, mainly for cross-platform checks.

Usage:
    zkeb vector                               # pinned hierarchy vector
    zkeb vector --umk <hex> --device-id ID    # derive DMK/BEK/MEK
    zkeb hkdf --ikm <hex> --salt <hex> --info <hex> --length 42
    zkeb generate-umk
    zkeb recovery-key --salt <hex>            # PBKDF2 key, prompts for the password
    zkeb keypair                              # RSA signing key pair (DER hex)
    zkeb selftest --samples 256

Global options:
    --config PATH      YAML config (defaults to $ZKEB_CONFIG)
    --log-level LEVEL  override the configured log level
"""

from __future__ import annotations

import argparse
import getpass
import json
import logging
import sys
from typing import List, Optional

from .config import LOG_LEVELS, load_config
from .crypto.errors import ZKEBError
from .crypto.hierarchy import derive_keys_from_umk, generate_user_master_key
from .crypto.hkdf import hkdf
from .crypto.signing import export_key_pair, get_modulus_length
from .diagnostics import run_self_test
from .vectors import CROSS_PLATFORM_VECTOR

logger = logging.getLogger("zkeb.cli")


def _hex(value: str) -> bytes:
    try:
        return bytes.fromhex(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a hex string: {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zkeb",
        description="ZKEB key derivation and envelope encryption tools",
    )
    parser.add_argument("--config", help="Path to YAML config")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Override the configured log level",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_vector = sub.add_parser("vector", help="Derive DMK/BEK/MEK for a UMK and device")
    p_vector.add_argument("--umk", type=_hex, default=bytes.fromhex(CROSS_PLATFORM_VECTOR.umk))
    p_vector.add_argument("--device-id", default=CROSS_PLATFORM_VECTOR.device_id)

    p_hkdf = sub.add_parser("hkdf", help="Run HKDF-SHA256")
    p_hkdf.add_argument("--ikm", type=_hex, required=True)
    p_hkdf.add_argument("--salt", type=_hex, default=b"")
    p_hkdf.add_argument("--info", type=_hex, default=b"")
    p_hkdf.add_argument("--length", type=int, required=True)

    sub.add_parser("generate-umk", help="Print a fresh User Master Key as hex")

    p_recovery = sub.add_parser("recovery-key", help="Derive a PBKDF2 recovery key")
    p_recovery.add_argument("--password", help="Read from the terminal when omitted")
    p_recovery.add_argument("--salt", type=_hex, default=None)

    sub.add_parser("keypair", help="Generate a device signing key pair")

    p_self = sub.add_parser("selftest", help="Run vector, avalanche and nonce checks")
    p_self.add_argument("--samples", type=int, default=None)
    p_self.add_argument("--nonces", type=int, default=10_000)
    p_self.add_argument("--seed", type=int, default=None)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except ZKEBError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=(args.log_level or config.log_level).upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        if args.command == "vector":
            result = derive_keys_from_umk(args.umk, args.device_id)
            print(json.dumps({
                "device_id": result.dmk.device_id,
                "dmk": result.dmk.key.hex(),
                "bek": result.keys.backup_encryption_key.hex(),
                "mek": result.keys.metadata_encryption_key.hex(),
            }, indent=2))

        elif args.command == "hkdf":
            print(hkdf(args.salt, args.ikm, args.info, args.length).hex())

        elif args.command == "generate-umk":
            print(generate_user_master_key().key.hex())

        elif args.command == "recovery-key":
            password = args.password
            if password is None:
                password = getpass.getpass("Recovery password: ")
            derived = config.derive_recovery_key(password, args.salt)
            print(json.dumps({
                "salt": derived.salt.hex(),
                "iterations": derived.iterations,
                "key": derived.key.hex(),
            }, indent=2))

        elif args.command == "keypair":
            key_pair = config.generate_signing_key_pair()
            exported = export_key_pair(key_pair)
            print(json.dumps({
                "modulus_bits": get_modulus_length(key_pair.public_key),
                "public_key": exported.public_key.hex(),
                "private_key": exported.private_key.hex(),
            }, indent=2))

        elif args.command == "selftest":
            samples = args.samples or config.self_test_samples
            report = run_self_test(samples=samples, nonce_samples=args.nonces, seed=args.seed)
            print(json.dumps(report.to_dict(), indent=2))
            return 0 if report.passed else 1

    except ZKEBError as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"error: {e}", file=sys.stderr)
        return 2

    return 0


if __name__ == "__main__":
    sys.exit(main())
