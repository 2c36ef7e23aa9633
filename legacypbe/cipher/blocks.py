"""Raw block-cipher primitives for the legacy PBE families.

pycryptodome supplies the ciphers; they are opened in ECB mode and used one
block at a time so chaining stays under our control (see modes.py).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from Crypto.Cipher import ARC2, DES3

from ..errors import ConstructionError


class BlockCipher(Protocol):
    block_size: int

    def encrypt_block(self, block: bytes) -> bytes: ...

    def decrypt_block(self, block: bytes) -> bytes: ...


@dataclass
class ECBBlock:
    """Single-block view over a keyed pycryptodome ECB cipher."""
    name: str
    block_size: int
    _ecb: Any

    def encrypt_block(self, block: bytes) -> bytes:
        if len(block) != self.block_size:
            raise ValueError(f"{self.name} block must be {self.block_size} bytes")
        return self._ecb.encrypt(block)

    def decrypt_block(self, block: bytes) -> bytes:
        if len(block) != self.block_size:
            raise ValueError(f"{self.name} block must be {self.block_size} bytes")
        return self._ecb.decrypt(block)


def new_triple_des(key: bytes) -> ECBBlock:
    try:
        ecb = DES3.new(key, DES3.MODE_ECB)
    except ValueError as exc:
        raise ConstructionError(f"3DES rejected the derived key: {exc}") from exc
    return ECBBlock(name="3DES", block_size=DES3.block_size, _ecb=ecb)


def new_rc2(key: bytes) -> ECBBlock:
    # Effective key bits track the actual key length (40 bits for a 5-byte key).
    try:
        ecb = ARC2.new(key, ARC2.MODE_ECB, effective_keylen=len(key) * 8)
    except ValueError as exc:
        raise ConstructionError(f"RC2 rejected the derived key: {exc}") from exc
    return ECBBlock(name="RC2", block_size=ARC2.block_size, _ecb=ecb)
