# Typed models shared across the keystore (KeyName, Algorithm, KeyInfo).

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from cryptography.hazmat.primitives.asymmetric import ec, ed25519

from .exceptions import InvalidKeyName

# 255-byte file name limit minus the ".pem" suffix
MAX_KEY_NAME_LENGTH = 251

_KEY_NAME_RE = re.compile(r"[A-Za-z0-9_\-][A-Za-z0-9_.\-]*")


class KeyName(str):
    """Validated key identifier, usable verbatim as a file name component

    Names are case-sensitive and never case-folded. On a case-insensitive
    filesystem ``Key`` and ``key`` resolve to the same file, so callers
    sharing such a store must pick names that differ by more than case.
    """

    __slots__ = ()

    def __new__(cls, value: str) -> KeyName:
        if isinstance(value, KeyName):
            return value
        if not isinstance(value, str):
            raise InvalidKeyName(f"Key name must be a string, got {type(value).__name__}")
        if not value:
            raise InvalidKeyName("Key name must not be empty")
        if len(value) > MAX_KEY_NAME_LENGTH:
            raise InvalidKeyName(f"Key name longer than {MAX_KEY_NAME_LENGTH} characters")
        if not _KEY_NAME_RE.fullmatch(value):
            raise InvalidKeyName(f"Invalid key name: {value!r}")
        return super().__new__(cls, value)

    def __repr__(self) -> str:
        return f"KeyName({str.__repr__(self)})"


class Algorithm(str, Enum):
    """Signing algorithms the key ring knows how to use"""

    ECDSA_NIST_P256 = "ecdsa-nistp256"
    ECDSA_NIST_P384 = "ecdsa-nistp384"
    ECDSA_SECP256K1 = "ecdsa-secp256k1"
    ED25519 = "ed25519"

    @classmethod
    def from_private_key(cls, key: object) -> Optional[Algorithm]:
        if isinstance(key, ed25519.Ed25519PrivateKey):
            return cls.ED25519
        if isinstance(key, ec.EllipticCurvePrivateKey):
            return _CURVES.get(key.curve.name)
        return None


_CURVES = {
    ec.SECP256R1.name: Algorithm.ECDSA_NIST_P256,
    ec.SECP384R1.name: Algorithm.ECDSA_NIST_P384,
    ec.SECP256K1.name: Algorithm.ECDSA_SECP256K1,
}


@dataclass(frozen=True, slots=True)
class KeyInfo:
    """Snapshot of what can be learned about a stored key without using it"""
    name: KeyName
    algorithm: Optional[Algorithm] = None
    encrypted: bool = False

    def as_dict(self) -> dict:
        return {
            "name": str(self.name),
            "algorithm": self.algorithm.value if self.algorithm else None,
            "encrypted": self.encrypted,
        }


__all__ = ["Algorithm", "KeyInfo", "KeyName", "MAX_KEY_NAME_LENGTH"]
