from __future__ import annotations

from typing import Optional

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.types import PrivateKeyTypes

from . import der
from ..exceptions import KeyMalformed
from ..models import Algorithm
from ..secret import SecretDocument

PRIVATE_KEY_LABEL = "PRIVATE KEY"
ENCRYPTED_PRIVATE_KEY_LABEL = "ENCRYPTED PRIVATE KEY"

ID_EC_PUBLIC_KEY = "1.2.840.10045.2.1"
ID_ED25519 = "1.3.101.112"

# Only these key types can map to an Algorithm
_SIGNING_KEY_OIDS = frozenset({ID_EC_PUBLIC_KEY, ID_ED25519})


def validate_label(label: str, expected: str = PRIVATE_KEY_LABEL) -> None:
    if label != expected:
        raise KeyMalformed(f"Unexpected PEM label {label!r}, expected {expected!r}")


def validate_document(document: SecretDocument) -> None:
    """Reject payloads that are not a single DER SEQUENCE"""
    with document.view() as data:
        der.check_document(data)


def algorithm_oid(document: SecretDocument) -> str:
    """Read the ``privateKeyAlgorithm`` OID of a ``PrivateKeyInfo``"""
    with document.view() as data:
        der.check_document(data)
        start, end = der.expect(data, der.SEQUENCE, 0, len(data))
        _version_start, offset = der.expect(data, der.INTEGER, start, end)
        alg_start, alg_end = der.expect(data, der.SEQUENCE, offset, end)
        oid_start, oid_end = der.expect(data, der.OBJECT_IDENTIFIER, alg_start, alg_end)
        content = bytes(data[oid_start:oid_end])
    return der.decode_oid(content)


def decode_private_key(document: SecretDocument) -> PrivateKeyTypes:
    """Decode a DER ``PrivateKeyInfo`` into a ``cryptography`` key object"""
    try:
        with document.view() as data:
            return serialization.load_der_private_key(data, password=None)
    except (ValueError, TypeError) as exc:
        raise KeyMalformed("Invalid PKCS#8 PrivateKeyInfo") from exc


def decode_algorithm_identifier(document: SecretDocument) -> Optional[Algorithm]:
    """Map the document's algorithm identifier to a known ``Algorithm``

    Unknown algorithm OIDs and unsupported curves yield ``None`` without a
    full key decode; a structurally broken document still raises
    ``KeyMalformed``.
    """
    if algorithm_oid(document) not in _SIGNING_KEY_OIDS:
        return None
    try:
        key = decode_private_key(document)
    except UnsupportedAlgorithm:
        return None
    return Algorithm.from_private_key(key)


__all__ = [
    "ENCRYPTED_PRIVATE_KEY_LABEL",
    "ID_EC_PUBLIC_KEY",
    "ID_ED25519",
    "PRIVATE_KEY_LABEL",
    "algorithm_oid",
    "decode_algorithm_identifier",
    "decode_private_key",
    "validate_document",
    "validate_label",
]
