"""PKCS#12 password-based key derivation (RFC 7292, Appendix B.2).

The diversifier ("purpose") byte selects independent output streams from the
same password and salt:
- 1 for cipher key material
- 2 for IV material
- 3 for MAC key material

Passwords are raw bytes; text passwords are expected as zero-terminated
BMPString (see `bmp_password`).
"""
from __future__ import annotations

import hashlib

from .errors import FormatError

PURPOSE_KEY = 1
PURPOSE_IV = 2
PURPOSE_MAC = 3

SHA1_BLOCK_SIZE = 64
SHA1_DIGEST_SIZE = 20


def bmp_password(text: str) -> bytes:
    """Encode a text password as a zero-terminated BMPString (UTF-16BE)."""
    for ch in text:
        if ord(ch) > 0xFFFF:
            raise FormatError("password contains characters outside the Basic Multilingual Plane")
    return text.encode("utf-16-be") + b"\x00\x00"


def _fill(data: bytes, v: int) -> bytes:
    # Concatenate copies of data up to the next multiple of v bytes.
    if not data:
        return b""
    n = v * ((len(data) + v - 1) // v)
    return (data * (n // len(data) + 1))[:n]


def pkcs12_kdf(
    hash_name: str,
    block_size: int,
    digest_size: int,
    salt: bytes,
    password: bytes,
    iterations: int,
    purpose: int,
    length: int,
) -> bytes:
    if purpose not in (PURPOSE_KEY, PURPOSE_IV, PURPOSE_MAC):
        raise ValueError(f"Unknown derivation purpose: {purpose}")
    if iterations < 1:
        raise FormatError("iteration count must be positive")
    if length < 0:
        raise ValueError("length must be non-negative")

    actual = hashlib.new(hash_name).digest_size
    if actual != digest_size:
        raise ValueError(f"{hash_name} produces {actual}-byte digests, expected {digest_size}")

    v = block_size
    modulus = 1 << (8 * v)
    diversifier = bytes([purpose]) * v
    i_value = bytearray(_fill(salt, v) + _fill(password, v))

    out = bytearray()
    while len(out) < length:
        a = hashlib.new(hash_name, diversifier + bytes(i_value)).digest()
        for _ in range(1, iterations):
            a = hashlib.new(hash_name, a).digest()
        out += a
        if len(out) >= length:
            break

        # I_j = (I_j + B + 1) mod 2^(8v) for every v-byte block of I
        b = int.from_bytes(_fill(a, v), "big") + 1
        for j in range(0, len(i_value), v):
            block = (int.from_bytes(i_value[j:j + v], "big") + b) % modulus
            i_value[j:j + v] = block.to_bytes(v, "big")

    return bytes(out[:length])

