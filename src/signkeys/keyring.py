from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Dict, Iterator

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519
from cryptography.hazmat.primitives.asymmetric.types import (
    PrivateKeyTypes,
    PublicKeyTypes,
)

from .codec import decode_private_key
from .exceptions import KeyRingError
from .models import Algorithm
from .secret import SecretDocument

_ECDSA_HASHES = {
    Algorithm.ECDSA_NIST_P256: hashes.SHA256,
    Algorithm.ECDSA_NIST_P384: hashes.SHA384,
    Algorithm.ECDSA_SECP256K1: hashes.SHA256,
}


@dataclass(frozen=True, slots=True)
class KeyHandle:
    """Opaque reference to a key held by a ``KeyRing``"""
    algorithm: Algorithm
    fingerprint: str

    def __str__(self) -> str:
        return f"{self.algorithm.value}:{self.fingerprint[:16]}"


def public_key_fingerprint(public_key: PublicKeyTypes) -> str:
    der = public_key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return hashlib.sha256(der).hexdigest()


class KeyRing:
    """In-memory registry of signing keys addressed by ``KeyHandle``"""

    def __init__(self) -> None:
        self._keys: Dict[KeyHandle, PrivateKeyTypes] = {}

    def register(self, private_key: PrivateKeyTypes) -> KeyHandle:
        algorithm = Algorithm.from_private_key(private_key)
        if algorithm is None:
            raise KeyRingError(f"Unsupported key type: {type(private_key).__name__}")
        handle = KeyHandle(algorithm, public_key_fingerprint(private_key.public_key()))
        self._keys.setdefault(handle, private_key)
        return handle

    def load_pkcs8(self, document: SecretDocument) -> KeyHandle:
        return self.register(decode_private_key(document))

    def sign(self, handle: KeyHandle, message: bytes) -> bytes:
        key = self._get(handle)
        if handle.algorithm is Algorithm.ED25519:
            return key.sign(message)
        return key.sign(message, ec.ECDSA(_ECDSA_HASHES[handle.algorithm]()))

    def verify(self, handle: KeyHandle, message: bytes, signature: bytes) -> None:
        public_key = self.verifying_key(handle)
        try:
            if handle.algorithm is Algorithm.ED25519:
                public_key.verify(signature, message)
            else:
                public_key.verify(
                    signature, message, ec.ECDSA(_ECDSA_HASHES[handle.algorithm]())
                )
        except InvalidSignature as exc:
            raise KeyRingError("Signature verification failed") from exc

    def verifying_key(self, handle: KeyHandle) -> ed25519.Ed25519PublicKey | ec.EllipticCurvePublicKey:
        return self._get(handle).public_key()

    def remove(self, handle: KeyHandle) -> None:
        self._get(handle)
        del self._keys[handle]

    def _get(self, handle: KeyHandle) -> PrivateKeyTypes:
        try:
            return self._keys[handle]
        except KeyError:
            raise KeyRingError(f"Unknown key handle: {handle}") from None

    def __contains__(self, handle: object) -> bool:
        return handle in self._keys

    def __iter__(self) -> Iterator[KeyHandle]:
        return iter(list(self._keys))

    def __len__(self) -> int:
        return len(self._keys)


__all__ = ["KeyHandle", "KeyRing", "public_key_fingerprint"]
