"""Command line front end for the legacy PKCS#12 PBE codec.

Usage:
    legacypbe families
    legacypbe encrypt --password secret --in "hello"
    legacypbe decrypt --password secret --algorithm-hex 30... --in-hex ab12...
    legacypbe selftest --vectors 100 --report reports/selftest.json
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from .cipher.registry import DEFAULT_REGISTRY, PBEFamily
from .codec import decrypt, encrypt
from .config import load_settings
from .errors import ConfigError, DecryptionError, PBEError
from .evaluation import run_all_families
from .kdf import bmp_password
from .params import AlgorithmIdentifier, new_algorithm_identifier
from .utils.reports import report_path, write_report

logger = logging.getLogger(__name__)


def _bhex(s: str) -> bytes:
    try:
        return bytes.fromhex(s)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid hex: {e}")


def _emit(args: argparse.Namespace, out: Dict[str, Any]) -> None:
    if args.json:
        print(json.dumps(out))
    else:
        for k, v in out.items():
            print(f"{k}={v}")


def build_parser() -> argparse.ArgumentParser:
    settings = load_settings()
    p = argparse.ArgumentParser(description="Legacy PKCS#12 password-based encryption")
    sub = p.add_subparsers(dest="command", required=True)

    def common(sp: argparse.ArgumentParser) -> None:
        sp.add_argument("--json", action="store_true", help="Output JSON to stdout")

    fam = sub.add_parser("families", help="List supported PBE families")
    common(fam)

    enc = sub.add_parser("encrypt", help="Pad and encrypt data under a password")
    common(enc)
    enc.add_argument(
        "--family", choices=[f.value for f in PBEFamily], default=settings.default_family.value,
        help=f"PBE family (default: {settings.default_family.value})",
    )
    enc.add_argument("--password", type=str, required=True, help="Password (encoded as BMPString)")
    enc.add_argument("--salt", type=_bhex, default=None, help="Salt in hex (default: random)")
    enc.add_argument(
        "--iterations", type=int, default=settings.default_iterations,
        help=f"KDF iterations (default: {settings.default_iterations})",
    )
    src = enc.add_mutually_exclusive_group(required=True)
    src.add_argument("--in", dest="in_text", type=str, help="Input text (UTF-8)")
    src.add_argument("--in-hex", dest="in_hex", type=_bhex, help="Input as hex bytes")

    dec = sub.add_parser("decrypt", help="Decrypt and unpad data under a password")
    common(dec)
    dec.add_argument("--algorithm-hex", type=_bhex, required=True, help="DER AlgorithmIdentifier in hex")
    dec.add_argument("--password", type=str, required=True, help="Password (encoded as BMPString)")
    dec.add_argument("--in-hex", dest="in_hex", type=_bhex, required=True, help="Ciphertext in hex")

    st = sub.add_parser("selftest", help="Run randomized roundtrip and tamper checks")
    common(st)
    st.add_argument("--vectors", type=int, default=100, help="Vectors per family (default: 100)")
    st.add_argument("--seed", type=int, default=settings.global_seed, help="Random seed")
    st.add_argument("--iterations", type=int, default=16, help="KDF iterations per vector (default: 16)")
    st.add_argument("--report", type=str, default=None, help="Write a JSON report to this path")
    st.add_argument("--save-report", action="store_true", help="Write a JSON report under the reports dir")

    return p


def _families(args: argparse.Namespace) -> int:
    rows = [
        {
            "family": d.name,
            "oid": d.oid,
            "key_length": d.key_length,
            "iv_length": d.iv_length,
            "block_size": d.block_size,
        }
        for d in DEFAULT_REGISTRY.list()
    ]
    if args.json:
        print(json.dumps({"families": rows}))
    else:
        for r in rows:
            print(f"{r['family']}  oid={r['oid']}  key={r['key_length']}B  iv={r['iv_length']}B  block={r['block_size']}B")
    return 0


def _encrypt(args: argparse.Namespace) -> int:
    data = args.in_hex if args.in_hex is not None else args.in_text.encode("utf-8")
    algorithm = new_algorithm_identifier(args.family, salt=args.salt, iterations=args.iterations)
    ct = encrypt(algorithm, bmp_password(args.password), data)
    _emit(args, {"algorithm": algorithm.to_der().hex(), "ciphertext": ct.hex()})
    return 0


def _decrypt(args: argparse.Namespace) -> int:
    algorithm = AlgorithmIdentifier.from_der(args.algorithm_hex)
    pt = decrypt(algorithm, bmp_password(args.password), args.in_hex)
    _emit(args, {"plaintext": pt.decode("utf-8", errors="replace"), "plaintext_hex": pt.hex()})
    return 0


def _selftest(args: argparse.Namespace) -> int:
    results = run_all_families(num_vectors=args.vectors, seed=args.seed, iterations=args.iterations)
    report = {k: [r.to_dict() for r in v] for k, v in results.items()}
    ok = all(r.is_perfect for v in results.values() for r in v)
    report["ok"] = ok

    path = args.report
    if path is None and args.save_report:
        path = str(report_path(load_settings().reports_dir, "selftest"))
    if path:
        write_report(path, report)
        logger.info("Self-test report written to %s", path)

    if args.json:
        print(json.dumps(report))
    else:
        for v in results.values():
            for r in v:
                print(r.summary())
    return 0 if ok else 1


_COMMANDS = {
    "families": _families,
    "encrypt": _encrypt,
    "decrypt": _decrypt,
    "selftest": _selftest,
}


def main(argv: Optional[List[str]] = None) -> int:
    try:
        parser = build_parser()
    except ConfigError as e:
        logger.debug("ConfigError: %s", e)
        print(f"error={e}", file=sys.stderr)
        return 2
    args = parser.parse_args(argv)

    try:
        return _COMMANDS[args.command](args)
    except DecryptionError as e:
        logger.debug("Decryption failed")
        _emit(args, {"error": str(e)})
        return 1
    except PBEError as e:
        logger.debug("%s: %s", type(e).__name__, e)
        _emit(args, {"error": str(e)})
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
