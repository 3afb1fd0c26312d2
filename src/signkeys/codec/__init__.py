"""PKCS#8 PEM codec: envelope handling plus file read/write helpers."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Tuple

from . import der, pem, pkcs8
from ..secret import SecretBuffer, SecretDocument
from .pkcs8 import (
    ENCRYPTED_PRIVATE_KEY_LABEL,
    ID_ED25519,
    PRIVATE_KEY_LABEL,
    algorithm_oid,
    decode_algorithm_identifier,
    decode_private_key,
    validate_document,
    validate_label,
)

SECRET_FILE_MODE = 0o600


def read_pem_file(path: Path) -> Tuple[str, SecretDocument]:
    with SecretBuffer.from_file(path) as buf:
        return pem.decode(buf)


def write_pem_file(path: Path, document: SecretDocument, label: str) -> None:
    """Write ``document`` as PEM, creating the file owner-readable only"""
    with pem.encode(document, label) as buf:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, SECRET_FILE_MODE)
        with os.fdopen(fd, "wb", buffering=0) as handle, buf.view() as data:
            written = 0
            while written < len(data):
                written += handle.write(data[written:])


__all__ = [
    "ENCRYPTED_PRIVATE_KEY_LABEL",
    "ID_ED25519",
    "PRIVATE_KEY_LABEL",
    "SECRET_FILE_MODE",
    "algorithm_oid",
    "decode_algorithm_identifier",
    "decode_private_key",
    "der",
    "pem",
    "pkcs8",
    "read_pem_file",
    "validate_document",
    "validate_label",
    "write_pem_file",
]
