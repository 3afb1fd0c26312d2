from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa

from signkeys import Algorithm, FsKeyStore, SecretDocument

_GENERATORS: dict[Algorithm, Callable[[], object]] = {
    Algorithm.ED25519: ed25519.Ed25519PrivateKey.generate,
    Algorithm.ECDSA_NIST_P256: lambda: ec.generate_private_key(ec.SECP256R1()),
    Algorithm.ECDSA_NIST_P384: lambda: ec.generate_private_key(ec.SECP384R1()),
    Algorithm.ECDSA_SECP256K1: lambda: ec.generate_private_key(ec.SECP256K1()),
}

EXAMPLE_KEY = "example-key"

# PrivateKeyInfo{0, AlgorithmIdentifier{1.2.3.4}, OCTET STRING}
UNKNOWN_ALGORITHM_DER = bytes.fromhex("300e020100300506032a030404020400")


def generate_key(algorithm: Algorithm):
    return _GENERATORS[algorithm]()


def pkcs8_der(private_key) -> bytes:
    return private_key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


def pkcs8_pem(private_key, passphrase: bytes | None = None) -> bytes:
    if passphrase:
        encryption = serialization.BestAvailableEncryption(passphrase)
    else:
        encryption = serialization.NoEncryption()
    return private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=encryption,
    )


@pytest.fixture
def keystore(tmp_path: Path) -> FsKeyStore:
    return FsKeyStore.create_or_open(tmp_path / "keys")


@pytest.fixture
def ed25519_key():
    return generate_key(Algorithm.ED25519)


@pytest.fixture
def ed25519_document(ed25519_key) -> SecretDocument:
    return SecretDocument(pkcs8_der(ed25519_key))


@pytest.fixture
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)
