"""Key and IV derivation for the legacy PBE families.

Both values come from the PKCS#12 KDF over SHA-1 (64-byte block, 20-byte
digest), with purpose 1 for the key and purpose 2 for the IV. The IV is
always derived at the descriptor's full length.
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional, Tuple

from .cipher.registry import CipherDescriptor
from .config import Settings, load_settings
from .errors import FormatError
from .kdf import PURPOSE_IV, PURPOSE_KEY, SHA1_BLOCK_SIZE, SHA1_DIGEST_SIZE, pkcs12_kdf


def check_iterations(iterations: int, settings: Optional[Settings] = None) -> None:
    settings = settings or load_settings()
    if iterations < 1:
        raise FormatError(f"iteration count must be positive (got {iterations})")
    if iterations > settings.max_iterations:
        raise FormatError(
            f"iteration count {iterations} exceeds the configured maximum of {settings.max_iterations}"
        )


def derive_key(
    descriptor: CipherDescriptor,
    salt: bytes,
    password: bytes,
    iterations: int,
    *,
    settings: Optional[Settings] = None,
) -> bytes:
    check_iterations(iterations, settings)
    return pkcs12_kdf(
        "sha1", SHA1_BLOCK_SIZE, SHA1_DIGEST_SIZE,
        salt, password, iterations, PURPOSE_KEY, descriptor.key_length,
    )


def derive_iv(
    descriptor: CipherDescriptor,
    salt: bytes,
    password: bytes,
    iterations: int,
    *,
    settings: Optional[Settings] = None,
) -> bytes:
    check_iterations(iterations, settings)
    return pkcs12_kdf(
        "sha1", SHA1_BLOCK_SIZE, SHA1_DIGEST_SIZE,
        salt, password, iterations, PURPOSE_IV, descriptor.iv_length,
    )


@contextmanager
def derived_secrets(
    descriptor: CipherDescriptor,
    salt: bytes,
    password: bytes,
    iterations: int,
    *,
    settings: Optional[Settings] = None,
) -> Iterator[Tuple[bytearray, bytearray]]:
    """Yield (key, iv) as mutable buffers that are zeroed on exit."""
    key = bytearray(derive_key(descriptor, salt, password, iterations, settings=settings))
    iv = bytearray(derive_iv(descriptor, salt, password, iterations, settings=settings))
    try:
        yield key, iv
    finally:
        key[:] = bytes(len(key))
        iv[:] = bytes(len(iv))
