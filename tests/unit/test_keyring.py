from __future__ import annotations

import pytest

from conftest import EXAMPLE_KEY, generate_key, pkcs8_der
from signkeys import Algorithm, FsKeyStore, KeyRing, KeyRingError, SecretDocument


@pytest.mark.parametrize("algorithm", list(Algorithm))
def test_import_sign_and_verify(keystore: FsKeyStore, algorithm: Algorithm) -> None:
    keystore.store(EXAMPLE_KEY, SecretDocument(pkcs8_der(generate_key(algorithm))))
    ring = KeyRing()

    handle = keystore.import_key(EXAMPLE_KEY, ring)

    assert handle.algorithm is algorithm
    assert handle in ring
    signature = ring.sign(handle, b"payload")
    ring.verify(handle, b"payload", signature)
    with pytest.raises(KeyRingError):
        ring.verify(handle, b"tampered", signature)


def test_import_unsupported_algorithm(keystore: FsKeyStore, rsa_key) -> None:
    keystore.store(EXAMPLE_KEY, SecretDocument(pkcs8_der(rsa_key)))
    ring = KeyRing()
    with pytest.raises(KeyRingError):
        keystore.import_key(EXAMPLE_KEY, ring)
    assert len(ring) == 0


def test_register_same_key_twice(ed25519_key) -> None:
    ring = KeyRing()
    first = ring.register(ed25519_key)
    second = ring.load_pkcs8(SecretDocument(pkcs8_der(ed25519_key)))
    assert first == second
    assert len(ring) == 1
    assert list(ring) == [first]


def test_verifying_key_matches(ed25519_key) -> None:
    ring = KeyRing()
    handle = ring.register(ed25519_key)
    ed25519_key.public_key().verify(ring.sign(handle, b"m"), b"m")
    assert ring.verifying_key(handle).public_bytes_raw() == ed25519_key.public_key().public_bytes_raw()


def test_unknown_handle(ed25519_key) -> None:
    ring = KeyRing()
    handle = ring.register(ed25519_key)
    ring.remove(handle)
    with pytest.raises(KeyRingError):
        ring.sign(handle, b"m")
    with pytest.raises(KeyRingError):
        ring.remove(handle)
