from __future__ import annotations

import enum
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, List, Mapping, Union

from ..errors import NotSupportedError
from .blocks import BlockCipher, new_rc2, new_triple_des

OID_PBE_SHA1_3DES = "1.2.840.113549.1.12.1.3"
OID_PBE_SHA1_RC2_40 = "1.2.840.113549.1.12.1.6"


class PBEFamily(str, enum.Enum):
    SHA1_3DES = "pbeWithSHAAnd3-KeyTripleDES-CBC"
    SHA1_RC2_40 = "pbeWithSHAAnd40BitRC2-CBC"


@dataclass(frozen=True)
class CipherDescriptor:
    family: PBEFamily
    oid: str
    create: Callable[[bytes], BlockCipher]
    key_length: int
    iv_length: int
    block_size: int

    @property
    def name(self) -> str:
        return self.family.value


_DESCRIPTORS: Mapping[str, CipherDescriptor] = MappingProxyType({
    OID_PBE_SHA1_3DES: CipherDescriptor(
        family=PBEFamily.SHA1_3DES,
        oid=OID_PBE_SHA1_3DES,
        create=new_triple_des,
        key_length=24,
        iv_length=8,
        block_size=8,
    ),
    OID_PBE_SHA1_RC2_40: CipherDescriptor(
        family=PBEFamily.SHA1_RC2_40,
        oid=OID_PBE_SHA1_RC2_40,
        create=new_rc2,
        key_length=5,
        iv_length=8,
        block_size=8,
    ),
})


class CipherRegistry:
    def __init__(self):
        self._descriptors: Mapping[str, CipherDescriptor] = _DESCRIPTORS

    def resolve(self, algorithm) -> CipherDescriptor:
        """Look up the descriptor for an AlgorithmIdentifier or a dotted OID."""
        oid = algorithm if isinstance(algorithm, str) else algorithm.algorithm
        if oid not in self._descriptors:
            raise NotSupportedError(oid)
        return self._descriptors[oid]

    def by_name(self, family: Union[str, PBEFamily]) -> CipherDescriptor:
        try:
            family = PBEFamily(family)
        except ValueError:
            raise NotSupportedError(family) from None
        for d in self._descriptors.values():
            if d.family is family:
                return d
        raise NotSupportedError(family.value)  # pragma: no cover

    def list(self) -> List[CipherDescriptor]:
        out = list(self._descriptors.values())
        out.sort(key=lambda d: d.name)
        return out

    def exists(self, oid: str) -> bool:
        return oid in self._descriptors


DEFAULT_REGISTRY = CipherRegistry()


def resolve(algorithm) -> CipherDescriptor:
    return DEFAULT_REGISTRY.resolve(algorithm)
