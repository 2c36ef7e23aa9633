"""Error kinds raised by the PBE layer.

Every failure propagates straight to the caller; nothing here is retried.
"""
from __future__ import annotations


class PBEError(Exception):
    """Base class for all legacypbe errors."""


class NotSupportedError(PBEError, NotImplementedError):
    def __init__(self, oid: str):
        self.oid = oid
        super().__init__(f"algorithm {oid} is not supported")


class FormatError(PBEError, ValueError):
    pass


class ConstructionError(PBEError, ValueError):
    pass


class ConfigError(PBEError, ValueError):
    """Invalid value in the environment or .env file."""


class DecryptionError(PBEError):
    """Uniform failure for wrong passwords, corrupted data and bad padding.

    Do not subclass this into more specific padding errors: callers (and
    attackers) must not be able to tell the cases apart.
    """

    MESSAGE = "decryption failed: wrong password or corrupted data"

    def __init__(self) -> None:
        super().__init__(self.MESSAGE)
