"""Password-based encryption for legacy PKCS#12 credential bundles.

Provides:
- The two legacy PKCS#12 PBE families (SHA-1 + 3-key 3DES, SHA-1 + 40-bit RC2)
- RFC 7292 Appendix B key/IV derivation
- CBC encryption/decryption with pad-length padding and uniform failure on
  wrong passwords or tampered data

Legacy algorithms only: use them to read and write existing containers, not
to protect new data.
"""

from .cipher.registry import (
    OID_PBE_SHA1_3DES,
    OID_PBE_SHA1_RC2_40,
    CipherDescriptor,
    CipherRegistry,
    PBEFamily,
    resolve,
)
from .codec import (
    EncryptedContent,
    decrypt,
    decrypt_content,
    encrypt,
    encrypt_content,
    pbe_cipher_for,
)
from .config import Settings, load_settings
from .derivation import derive_iv, derive_key
from .errors import ConfigError, ConstructionError, DecryptionError, FormatError, NotSupportedError, PBEError
from .kdf import bmp_password, pkcs12_kdf
from .params import AlgorithmIdentifier, PBEParameters, decode_pbe_parameters, new_algorithm_identifier

__all__ = [
    "OID_PBE_SHA1_3DES",
    "OID_PBE_SHA1_RC2_40",
    "CipherDescriptor",
    "CipherRegistry",
    "PBEFamily",
    "resolve",
    "EncryptedContent",
    "decrypt",
    "decrypt_content",
    "encrypt",
    "encrypt_content",
    "pbe_cipher_for",
    "Settings",
    "load_settings",
    "derive_iv",
    "derive_key",
    "ConfigError",
    "ConstructionError",
    "DecryptionError",
    "FormatError",
    "NotSupportedError",
    "PBEError",
    "bmp_password",
    "pkcs12_kdf",
    "AlgorithmIdentifier",
    "PBEParameters",
    "decode_pbe_parameters",
    "new_algorithm_identifier",
]
