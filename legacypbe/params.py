"""Algorithm identifiers and PKCS#12 PBE parameters.

DER layout (RFC 7292 / PKCS#5 v1.5):

    AlgorithmIdentifier ::= SEQUENCE {
        algorithm   OBJECT IDENTIFIER,
        parameters  ANY DEFINED BY algorithm OPTIONAL }

    pkcs-12PbeParams ::= SEQUENCE {
        salt        OCTET STRING,
        iterations  INTEGER }
"""
from __future__ import annotations

import re
import secrets
from typing import Optional, Union

from asn1crypto import algos, core
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .cipher.registry import DEFAULT_REGISTRY, PBEFamily
from .config import Settings, load_settings
from .errors import FormatError

_DOTTED_OID = re.compile(r"^\d+(\.\d+)+$")


class _AlgorithmIdentifierAsn1(core.Sequence):
    _fields = [
        ("algorithm", core.ObjectIdentifier),
        ("parameters", core.Any, {"optional": True}),
    ]


class AlgorithmIdentifier(BaseModel):
    model_config = ConfigDict(frozen=True)

    algorithm: str = Field(..., description="Dotted object identifier")
    parameters: bytes = Field(default=b"", description="DER encoded parameters, empty when absent")

    @field_validator("algorithm")
    @classmethod
    def _dotted(cls, v: str) -> str:
        v = v.strip()
        if not _DOTTED_OID.match(v):
            raise ValueError(f"not a dotted object identifier: {v!r}")
        return v

    @classmethod
    def from_der(cls, der: bytes) -> "AlgorithmIdentifier":
        try:
            parsed = _AlgorithmIdentifierAsn1.load(bytes(der), strict=True)
            oid = parsed["algorithm"].dotted
            params = parsed["parameters"]
            blob = b"" if isinstance(params, core.Void) else params.dump()
        except (ValueError, TypeError) as exc:
            raise FormatError(f"malformed AlgorithmIdentifier: {exc}") from exc
        return cls(algorithm=oid, parameters=blob)

    def to_der(self) -> bytes:
        value = {"algorithm": self.algorithm}
        if self.parameters:
            try:
                value["parameters"] = core.Asn1Value.load(self.parameters, strict=True)
            except (ValueError, TypeError) as exc:
                raise FormatError(f"malformed algorithm parameters: {exc}") from exc
        return _AlgorithmIdentifierAsn1(value).dump()


class PBEParameters(BaseModel):
    model_config = ConfigDict(frozen=True)

    salt: bytes
    iterations: int = Field(..., ge=1)

    def to_der(self) -> bytes:
        return algos.Pbes1Params({"salt": self.salt, "iterations": self.iterations}).dump()


def decode_pbe_parameters(blob: bytes) -> PBEParameters:
    try:
        parsed = algos.Pbes1Params.load(bytes(blob), strict=True)
        salt = parsed["salt"].native
        iterations = parsed["iterations"].native
    except (ValueError, TypeError) as exc:
        raise FormatError(f"malformed PBE parameters: {exc}") from exc
    try:
        return PBEParameters(salt=salt, iterations=iterations)
    except ValidationError as exc:
        raise FormatError(f"invalid PBE parameters: {exc.errors()[0]['msg']}") from exc


def new_algorithm_identifier(
    family: Union[str, PBEFamily],
    *,
    salt: Optional[bytes] = None,
    iterations: Optional[int] = None,
    settings: Optional[Settings] = None,
) -> AlgorithmIdentifier:
    """Build an identifier for encryption, with a fresh random salt by default."""
    settings = settings or load_settings()
    descriptor = DEFAULT_REGISTRY.by_name(family)
    if salt is None:
        salt = secrets.token_bytes(settings.salt_size)
    if iterations is None:
        iterations = settings.default_iterations
    try:
        params = PBEParameters(salt=salt, iterations=iterations)
    except ValidationError as exc:
        raise FormatError(f"invalid PBE parameters: {exc.errors()[0]['msg']}") from exc
    return AlgorithmIdentifier(algorithm=descriptor.oid, parameters=params.to_der())
