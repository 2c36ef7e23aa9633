"""Password-based encryption and decryption of PKCS#12 contents.

Flow: resolve the cipher family from the algorithm OID, decode salt and
iteration count, derive key and IV, then run CBC over the whole buffer.

Padding appends p copies of the byte p, with p in [1, block_size]; input that
is already block aligned gets a full extra block. On decryption every padding
anomaly raises the same DecryptionError as a wrong password.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, Tuple, Type, Union

from .cipher.blocks import BlockCipher
from .cipher.modes import CBCDecrypter, CBCEncrypter
from .cipher.registry import resolve
from .config import Settings
from .derivation import derived_secrets
from .errors import DecryptionError, FormatError
from .params import AlgorithmIdentifier, decode_pbe_parameters


def pbe_cipher_for(
    algorithm: AlgorithmIdentifier,
    password: bytes,
    *,
    settings: Optional[Settings] = None,
) -> Tuple[BlockCipher, bytes]:
    """Return the keyed block cipher and the derived IV for `algorithm`."""
    descriptor = resolve(algorithm)
    params = decode_pbe_parameters(algorithm.parameters)
    with derived_secrets(descriptor, params.salt, password, params.iterations, settings=settings) as (key, iv):
        return descriptor.create(key), bytes(iv)


def _cbc_for(
    mode: Type[Union[CBCEncrypter, CBCDecrypter]],
    algorithm: AlgorithmIdentifier,
    password: bytes,
    settings: Optional[Settings],
):
    block, iv = pbe_cipher_for(algorithm, password, settings=settings)
    return mode(block, iv), block.block_size


def cbc_decrypter_for(
    algorithm: AlgorithmIdentifier,
    password: bytes,
    *,
    settings: Optional[Settings] = None,
) -> Tuple[CBCDecrypter, int]:
    return _cbc_for(CBCDecrypter, algorithm, password, settings)


def cbc_encrypter_for(
    algorithm: AlgorithmIdentifier,
    password: bytes,
    *,
    settings: Optional[Settings] = None,
) -> Tuple[CBCEncrypter, int]:
    return _cbc_for(CBCEncrypter, algorithm, password, settings)


def pad(data: bytes, block_size: int) -> bytes:
    pad_len = block_size - len(data) % block_size
    return bytes(data) + bytes([pad_len]) * pad_len


def unpad(data: bytes, block_size: int) -> bytes:
    if not data:
        raise DecryptionError()
    pad_len = data[-1]
    if pad_len == 0 or pad_len > block_size:
        raise DecryptionError()
    if len(data) < pad_len:
        raise DecryptionError()
    if data[-pad_len:] != bytes([pad_len]) * pad_len:
        raise DecryptionError()
    return bytes(data[:-pad_len])


def decrypt(
    algorithm: AlgorithmIdentifier,
    password: bytes,
    ciphertext: bytes,
    *,
    settings: Optional[Settings] = None,
) -> bytes:
    cbc, block_size = cbc_decrypter_for(algorithm, password, settings=settings)

    if len(ciphertext) == 0:
        raise FormatError("empty encrypted data")
    if len(ciphertext) % block_size != 0:
        raise FormatError("input is not a multiple of the block size")

    decrypted = cbc.crypt_blocks(bytes(ciphertext))
    return unpad(decrypted, block_size)


def encrypt(
    algorithm: AlgorithmIdentifier,
    password: bytes,
    plaintext: bytes,
    *,
    settings: Optional[Settings] = None,
) -> bytes:
    cbc, block_size = cbc_encrypter_for(algorithm, password, settings=settings)
    return cbc.crypt_blocks(pad(plaintext, block_size))


# ---------------------------------------------------------------------------
# Content objects
# ---------------------------------------------------------------------------

class Decryptable(Protocol):
    @property
    def algorithm(self) -> AlgorithmIdentifier: ...

    @property
    def data(self) -> bytes: ...


class Encryptable(Protocol):
    algorithm: AlgorithmIdentifier
    data: bytes


@dataclass
class EncryptedContent:
    """Ciphertext together with the identifier needed to reverse it."""
    algorithm: AlgorithmIdentifier
    data: bytes = b""


def decrypt_content(info: Decryptable, password: bytes, *, settings: Optional[Settings] = None) -> bytes:
    return decrypt(info.algorithm, password, info.data, settings=settings)


def encrypt_content(
    info: Encryptable,
    plaintext: bytes,
    password: bytes,
    *,
    settings: Optional[Settings] = None,
) -> None:
    # info.data is only replaced once encryption has fully succeeded
    info.data = encrypt(info.algorithm, password, plaintext, settings=settings)
