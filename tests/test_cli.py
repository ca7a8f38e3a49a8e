#!/usr/bin/env python3
"""
test_cli.py - zkeb command line

Run with: pytest tests/test_cli.py -v
"""

import json

import pytest

from zkeb.cli import build_parser, main
from zkeb.crypto.signing import import_private_key, import_public_key, sign, verify
from zkeb.vectors import CROSS_PLATFORM_VECTOR


class TestVector:

    def test_default_vector(self, capsys):
        assert main(["vector"]) == 0
        out = json.loads(capsys.readouterr().out)
        assert out == {
            "device_id": "test-device-id",
            "dmk": CROSS_PLATFORM_VECTOR.dmk,
            "bek": CROSS_PLATFORM_VECTOR.bek,
            "mek": CROSS_PLATFORM_VECTOR.mek,
        }

    def test_custom_device(self, capsys):
        assert main(["vector", "--umk", "02" * 32, "--device-id", "phone"]) == 0
        out = json.loads(capsys.readouterr().out)
        assert out["device_id"] == "phone"
        assert out["dmk"] != CROSS_PLATFORM_VECTOR.dmk

    def test_invalid_umk_length(self, capsys):
        assert main(["vector", "--umk", "01" * 16]) == 2
        assert "error" in capsys.readouterr().err

    def test_blank_device_id(self, capsys):
        assert main(["vector", "--device-id", "  "]) == 2

    def test_bad_hex(self):
        with pytest.raises(SystemExit):
            main(["vector", "--umk", "zz"])


class TestHKDF:

    def test_rfc_case_1(self, capsys):
        code = main([
            "hkdf",
            "--ikm", "0b" * 22,
            "--salt", "000102030405060708090a0b0c",
            "--info", "f0f1f2f3f4f5f6f7f8f9",
            "--length", "42",
        ])
        assert code == 0
        assert capsys.readouterr().out.strip() == (
            "3cb25f25faacd57a90434f64d0362f2a2d2d0a90cf1a5a4c5db02d56ecc4c5bf"
            "34007208d5b887185865"
        )

    @pytest.mark.parametrize("length", ["0", "8161"])
    def test_bad_length(self, capsys, length):
        assert main(["hkdf", "--ikm", "00", "--length", length]) == 2

    def test_length_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["hkdf", "--ikm", "00"])


class TestLogLevel:

    def test_unknown_level_exits_2(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--log-level", "LOUD", "generate-umk"])
        assert exc_info.value.code == 2
        assert "invalid choice" in capsys.readouterr().err

    @pytest.mark.parametrize("level", ["debug", "Warning", "ERROR"])
    def test_level_is_case_insensitive(self, level):
        args = build_parser().parse_args(["--log-level", level, "generate-umk"])
        assert args.log_level == level.upper()

    def test_valid_level_runs(self, capsys):
        assert main(["--log-level", "warning", "generate-umk"]) == 0


class TestRecoveryKey:

    @pytest.fixture
    def one_iteration_config(self, tmp_path):
        path = tmp_path / "zkeb.yaml"
        path.write_text("pbkdf2_iterations: 1\n")
        return str(path)

    def test_uses_configured_iterations(self, one_iteration_config, capsys):
        code = main([
            "--config", one_iteration_config,
            "recovery-key", "--password", "password", "--salt", b"salt".hex(),
        ])
        assert code == 0
        out = json.loads(capsys.readouterr().out)
        assert out == {
            "salt": b"salt".hex(),
            "iterations": 1,
            "key": "120fb6cffcf8b32c43e7225256c4f837a86548c92ccc35480805987cb70be17b",
        }

    def test_prompts_for_password(self, one_iteration_config, monkeypatch, capsys):
        monkeypatch.setattr("zkeb.cli.getpass.getpass", lambda prompt: "password")
        code = main(["--config", one_iteration_config, "recovery-key", "--salt", b"salt".hex()])
        assert code == 0
        assert json.loads(capsys.readouterr().out)["key"].startswith("120fb6cf")

    def test_generates_configured_salt_length(self, tmp_path, capsys):
        path = tmp_path / "zkeb.yaml"
        path.write_text("pbkdf2_iterations: 10\npbkdf2_salt_length: 24\n")
        assert main(["--config", str(path), "recovery-key", "--password", "pw"]) == 0
        assert len(bytes.fromhex(json.loads(capsys.readouterr().out)["salt"])) == 24

    def test_empty_password_exits_2(self, one_iteration_config):
        code = main(["--config", one_iteration_config, "recovery-key", "--password", ""])
        assert code == 2


@pytest.mark.slow
class TestKeypair:

    def test_uses_configured_key_size(self, tmp_path, capsys):
        path = tmp_path / "zkeb.yaml"
        path.write_text("rsa_key_size: 2048\n")
        assert main(["--config", str(path), "keypair"]) == 0
        out = json.loads(capsys.readouterr().out)
        assert out["modulus_bits"] == 2048
        public_key = import_public_key(bytes.fromhex(out["public_key"]))
        private_key = import_private_key(bytes.fromhex(out["private_key"]))
        signature = sign(b"data", private_key)
        assert verify(b"data", signature, public_key)


class TestOtherCommands:

    def test_generate_umk(self, capsys):
        assert main(["generate-umk"]) == 0
        out = capsys.readouterr().out.strip()
        assert len(bytes.fromhex(out)) == 32

    def test_selftest(self, capsys):
        code = main(["selftest", "--samples", "16", "--nonces", "100", "--seed", "1"])
        assert code == 0
        assert json.loads(capsys.readouterr().out)["passed"] is True

    def test_missing_config(self, tmp_path, capsys):
        assert main(["--config", str(tmp_path / "nope.yaml"), "vector"]) == 2
        assert "error" in capsys.readouterr().err

    def test_config_file(self, tmp_path, capsys):
        path = tmp_path / "zkeb.yaml"
        path.write_text("self_test_samples: 8\nlog_level: warning\n")
        code = main(["--config", str(path), "selftest", "--nonces", "50", "--seed", "2"])
        assert code == 0

    def test_command_required(self):
        with pytest.raises(SystemExit):
            main([])
