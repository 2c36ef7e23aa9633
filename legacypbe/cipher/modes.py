from __future__ import annotations

from .blocks import BlockCipher


def xor_bytes(a: bytes, b: bytes) -> bytes:
    """XOR two byte strings of equal length."""
    if len(a) != len(b):
        raise ValueError("xor_bytes length mismatch")
    return bytes(x ^ y for x, y in zip(a, b))


class _CBCMode:
    def __init__(self, block: BlockCipher, iv: bytes):
        if len(iv) != block.block_size:
            raise ValueError(f"IV must be {block.block_size} bytes")
        self.block = block
        self.block_size = block.block_size
        self._prev = bytes(iv)

    def _check(self, data: bytes) -> None:
        if len(data) % self.block_size != 0:
            raise ValueError(f"input must be a multiple of {self.block_size} bytes")


class CBCEncrypter(_CBCMode):
    def crypt_blocks(self, data: bytes) -> bytes:
        self._check(data)
        bs = self.block_size
        out = bytearray()
        for i in range(0, len(data), bs):
            enc = self.block.encrypt_block(xor_bytes(data[i:i + bs], self._prev))
            out += enc
            self._prev = enc
        return bytes(out)


class CBCDecrypter(_CBCMode):
    def crypt_blocks(self, data: bytes) -> bytes:
        self._check(data)
        bs = self.block_size
        out = bytearray()
        for i in range(0, len(data), bs):
            block = bytes(data[i:i + bs])
            out += xor_bytes(self.block.decrypt_block(block), self._prev)
            self._prev = block
        return bytes(out)
