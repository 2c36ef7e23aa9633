import json
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Ensure project root is on path
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from legacypbe.cli import main as cli_main
from legacypbe.config import load_settings
from legacypbe.errors import DecryptionError
from legacypbe.utils.reports import report_path


def _run(capsys, argv):
    rc = cli_main(argv)
    return rc, capsys.readouterr().out


def test_cli_families(capsys):
    rc, out = _run(capsys, ["families", "--json"])
    assert rc == 0
    rows = json.loads(out)["families"]
    assert {r["oid"] for r in rows} == {"1.2.840.113549.1.12.1.3", "1.2.840.113549.1.12.1.6"}


def test_cli_encrypt_decrypt_roundtrip(capsys):
    rc, out = _run(capsys, [
        "encrypt", "--family", "pbeWithSHAAnd40BitRC2-CBC", "--password", "sesame",
        "--salt", "0001020304050607", "--iterations", "64", "--in", "hello", "--json",
    ])
    assert rc == 0
    enc = json.loads(out)
    assert len(bytes.fromhex(enc["ciphertext"])) == 8

    rc, out = _run(capsys, [
        "decrypt", "--algorithm-hex", enc["algorithm"], "--password", "sesame",
        "--in-hex", enc["ciphertext"], "--json",
    ])
    assert rc == 0
    dec = json.loads(out)
    assert dec["plaintext"] == "hello"
    assert dec["plaintext_hex"] == b"hello".hex()


def test_cli_text_output(capsys):
    rc, out = _run(capsys, ["encrypt", "--password", "pw", "--iterations", "8", "--in-hex", "00ff"])
    assert rc == 0
    assert out.startswith("algorithm=30")
    assert "ciphertext=" in out


def test_cli_reports_errors(capsys):
    # Unknown algorithm identifier (1.2.3.4, no parameters)
    rc, out = _run(capsys, [
        "decrypt", "--algorithm-hex", "300506032a0304", "--password", "pw",
        "--in-hex", "0011223344556677", "--json",
    ])
    assert rc == 2
    assert "1.2.3.4" in json.loads(out)["error"]

    # Misaligned ciphertext
    rc, out = _run(capsys, [
        "encrypt", "--password", "pw", "--salt", "0001020304050607", "--iterations", "8",
        "--in", "x", "--json",
    ])
    alg_hex = json.loads(out)["algorithm"]
    rc, out = _run(capsys, [
        "decrypt", "--algorithm-hex", alg_hex, "--password", "pw", "--in-hex", "00112233", "--json",
    ])
    assert rc == 2


def test_cli_decryption_error_exit_code(capsys):
    rc, out = _run(capsys, [
        "encrypt", "--password", "pw", "--salt", "0001020304050607", "--iterations", "8",
        "--in", "sixteen byte msg", "--json",
    ])
    enc = json.loads(out)
    ct = bytearray.fromhex(enc["ciphertext"])
    ct[15] ^= 0x08   # final pad byte becomes zero
    rc, out = _run(capsys, [
        "decrypt", "--algorithm-hex", enc["algorithm"], "--password", "pw", "--in-hex", ct.hex(), "--json",
    ])
    assert rc == 1
    assert json.loads(out)["error"] == DecryptionError.MESSAGE


def test_cli_selftest_writes_report(capsys, tmp_path):
    report = tmp_path / "selftest.json"
    rc, out = _run(capsys, ["selftest", "--vectors", "5", "--iterations", "2", "--report", str(report)])
    assert rc == 0
    assert "[PASS]" in out
    data = json.loads(report.read_text(encoding="utf-8"))
    assert data["ok"] is True
    assert len(data["roundtrip"]) == 2 and len(data["tamper"]) == 2


@pytest.fixture
def fresh_settings(monkeypatch):
    load_settings.cache_clear()
    yield monkeypatch
    load_settings.cache_clear()


def test_cli_rejects_unknown_default_family(capsys, fresh_settings):
    fresh_settings.setenv("PBE_DEFAULT_FAMILY", "pbeWithSHAAnd128BitRC4")
    rc = cli_main(["encrypt", "--password", "x", "--in", "hi"])
    captured = capsys.readouterr()
    assert rc == 2
    assert captured.out == ""
    assert captured.err.startswith("error=invalid configuration")


def test_cli_rejects_non_numeric_settings(capsys, fresh_settings):
    fresh_settings.setenv("PBE_MAX_ITERATIONS", "lots")
    assert cli_main(["families"]) == 2
    assert capsys.readouterr().err.startswith("error=invalid configuration")


def test_cli_uses_configured_default_family(capsys, fresh_settings):
    fresh_settings.setenv("PBE_DEFAULT_FAMILY", "pbeWithSHAAnd40BitRC2-CBC")
    rc, out = _run(capsys, ["encrypt", "--password", "x", "--in", "hi", "--iterations", "4", "--json"])
    assert rc == 0
    assert "060a2a864886f70d010c0106" in json.loads(out)["algorithm"]


def test_report_path_is_timestamped_and_sanitized(tmp_path):
    now = datetime(2026, 1, 8, 12, 34, 56, tzinfo=timezone.utc)
    assert report_path(tmp_path, " self test/1 ", now=now) == tmp_path / "self_test_1_20260108T123456Z.json"
