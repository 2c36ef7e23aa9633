"""Randomized verification of the PBE codec.

Roundtrip: P = D(E(P, pw), pw) for random passwords, salts and plaintexts,
with the ciphertext always longer than P and block aligned.

Tamper: flip one ciphertext bit and decrypt with the right password. The
outcome must be a DecryptionError or a different plaintext; a silent success
returning the original plaintext counts as a failure.
"""
from __future__ import annotations

import logging
import random
import string
import time
from dataclasses import dataclass, field, asdict
from typing import Any, Callable, Dict, List, Optional, Union

import numpy as np

from ..cipher.registry import DEFAULT_REGISTRY, PBEFamily
from ..codec import decrypt, encrypt
from ..errors import DecryptionError
from ..kdf import bmp_password
from ..params import new_algorithm_identifier

logger = logging.getLogger(__name__)

_PASSWORD_ALPHABET = string.ascii_letters + string.digits + string.punctuation

TAMPER_REJECTED = 0
TAMPER_ALTERED = 1
TAMPER_SILENT = 2


@dataclass
class RoundtripFailure:
    """Details of a single failed test vector."""
    vector_index: int
    plaintext_hex: str
    salt_hex: str
    ciphertext_hex: str
    decrypted_hex: str
    error: Optional[str]


@dataclass
class RoundtripResult:
    """Aggregate roundtrip result for one PBE family."""
    family: str
    oid: str
    block_size: int
    iterations: int
    total_vectors: int
    passed: int
    failed: int
    failures: List[RoundtripFailure] = field(default_factory=list)
    elapsed_seconds: float = 0.0
    seed: int = 1337

    @property
    def success_rate(self) -> float:
        return self.passed / self.total_vectors if self.total_vectors > 0 else 0.0

    @property
    def is_perfect(self) -> bool:
        return self.failed == 0

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["success_rate"] = self.success_rate
        return d

    def summary(self) -> str:
        status = "PASS" if self.is_perfect else "FAIL"
        return (
            f"[{status}] roundtrip {self.family}: "
            f"{self.passed}/{self.total_vectors} vectors passed "
            f"({self.elapsed_seconds:.2f}s)"
        )


@dataclass
class TamperResult:
    """Outcome counts of single-bit tampering for one PBE family."""
    family: str
    total_vectors: int
    rejected: int
    altered: int
    silent: int
    rejection_rate: float = 0.0
    elapsed_seconds: float = 0.0
    seed: int = 1337

    @property
    def is_perfect(self) -> bool:
        return self.silent == 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def summary(self) -> str:
        status = "PASS" if self.is_perfect else "FAIL"
        return (
            f"[{status}] tamper {self.family}: "
            f"rejected={self.rejected}, altered={self.altered}, silent={self.silent} "
            f"(rejection rate {self.rejection_rate:.3f})"
        )


def _rand_bytes(rng: random.Random, n: int) -> bytes:
    return bytes(rng.randrange(0, 256) for _ in range(n))


def _rand_password(rng: random.Random) -> bytes:
    n = rng.randrange(0, 17)
    return bmp_password("".join(rng.choice(_PASSWORD_ALPHABET) for _ in range(n)))


def _flip_bit(data: bytes, bit_index: int) -> bytes:
    out = bytearray(data)
    out[bit_index // 8] ^= 1 << (bit_index % 8)
    return bytes(out)


def run_roundtrip_tests(
    family: Union[str, PBEFamily],
    *,
    num_vectors: int = 200,
    seed: int = 1337,
    iterations: int = 16,
    max_failures_recorded: int = 10,
) -> RoundtripResult:
    """Run roundtrip verification across random vectors for one family.

    Args:
        family: PBE family name.
        num_vectors: Number of random (password, salt, plaintext) triples.
        seed: Random seed for deterministic reproducibility.
        iterations: KDF iteration count; kept low so the run stays fast.
        max_failures_recorded: Maximum number of failure details to keep.
    """
    descriptor = DEFAULT_REGISTRY.by_name(family)
    bs = descriptor.block_size
    rng = random.Random(seed)
    passed = 0
    failed = 0
    failures: List[RoundtripFailure] = []

    start = time.perf_counter()

    for i in range(num_vectors):
        salt = _rand_bytes(rng, 8)
        password = _rand_password(rng)
        pt = _rand_bytes(rng, rng.randrange(0, 3 * bs + bs))
        algorithm = new_algorithm_identifier(descriptor.family, salt=salt, iterations=iterations)

        ct = b""
        try:
            ct = encrypt(algorithm, password, pt)
            pt2 = decrypt(algorithm, password, ct)
            ok = pt2 == pt and len(ct) > len(pt) and len(ct) % bs == 0
            error = None
        except Exception as exc:
            pt2 = b""
            ok = False
            error = f"{type(exc).__name__}: {exc}"

        if ok:
            passed += 1
        else:
            failed += 1
            if len(failures) < max_failures_recorded:
                failures.append(RoundtripFailure(
                    vector_index=i,
                    plaintext_hex=pt.hex(),
                    salt_hex=salt.hex(),
                    ciphertext_hex=ct.hex() if ct else "<error>",
                    decrypted_hex=pt2.hex() if pt2 else "<error>",
                    error=error,
                ))

    elapsed = time.perf_counter() - start
    if failed:
        logger.warning("Roundtrip for %s failed on %d/%d vectors", descriptor.name, failed, num_vectors)

    return RoundtripResult(
        family=descriptor.name,
        oid=descriptor.oid,
        block_size=bs,
        iterations=iterations,
        total_vectors=num_vectors,
        passed=passed,
        failed=failed,
        failures=failures,
        elapsed_seconds=round(elapsed, 4),
        seed=seed,
    )


def run_tamper_tests(
    family: Union[str, PBEFamily],
    *,
    num_vectors: int = 200,
    seed: int = 1337,
    iterations: int = 16,
) -> TamperResult:
    descriptor = DEFAULT_REGISTRY.by_name(family)
    bs = descriptor.block_size
    rng = random.Random(seed)
    outcomes = np.zeros(num_vectors, dtype=np.int8)

    start = time.perf_counter()

    for i in range(num_vectors):
        salt = _rand_bytes(rng, 8)
        password = _rand_password(rng)
        pt = _rand_bytes(rng, rng.randrange(0, 3 * bs + bs))
        algorithm = new_algorithm_identifier(descriptor.family, salt=salt, iterations=iterations)

        ct = encrypt(algorithm, password, pt)
        tampered = _flip_bit(ct, rng.randrange(0, len(ct) * 8))
        try:
            recovered = decrypt(algorithm, password, tampered)
        except DecryptionError:
            outcomes[i] = TAMPER_REJECTED
            continue
        outcomes[i] = TAMPER_ALTERED if recovered != pt else TAMPER_SILENT

    elapsed = time.perf_counter() - start
    counts = np.bincount(outcomes, minlength=3)
    if counts[TAMPER_SILENT]:
        logger.warning("Tampering went unnoticed for %s on %d vectors", descriptor.name, counts[TAMPER_SILENT])

    return TamperResult(
        family=descriptor.name,
        total_vectors=num_vectors,
        rejected=int(counts[TAMPER_REJECTED]),
        altered=int(counts[TAMPER_ALTERED]),
        silent=int(counts[TAMPER_SILENT]),
        rejection_rate=float(np.mean(outcomes == TAMPER_REJECTED)) if num_vectors else 0.0,
        elapsed_seconds=round(elapsed, 4),
        seed=seed,
    )


def run_all_families(
    *,
    num_vectors: int = 200,
    seed: int = 1337,
    iterations: int = 16,
    progress_callback: Optional[Callable[[str, int, int], None]] = None,
) -> Dict[str, List[Any]]:
    """Run roundtrip and tamper checks for every registered family.

    Returns:
        {"roundtrip": [RoundtripResult...], "tamper": [TamperResult...]},
        each sorted by family name.
    """
    descriptors = DEFAULT_REGISTRY.list()
    roundtrips: List[RoundtripResult] = []
    tampers: List[TamperResult] = []

    for idx, descriptor in enumerate(descriptors):
        if progress_callback:
            progress_callback(descriptor.name, idx, len(descriptors))
        logger.info("Evaluating %s (%d vectors)", descriptor.name, num_vectors)

        roundtrips.append(run_roundtrip_tests(
            descriptor.family, num_vectors=num_vectors, seed=seed, iterations=iterations,
        ))
        tampers.append(run_tamper_tests(
            descriptor.family, num_vectors=num_vectors, seed=seed, iterations=iterations,
        ))

    return {
        "roundtrip": sorted(roundtrips, key=lambda r: r.family),
        "tamper": sorted(tampers, key=lambda r: r.family),
    }
