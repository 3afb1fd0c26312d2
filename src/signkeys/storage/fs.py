from __future__ import annotations

import contextlib
import os
import stat
from pathlib import Path
from typing import Iterator, Optional, Union

import structlog

from .. import codec
from ..codec import pem
from ..exceptions import KeyMalformed, KeyNotFound, NotADirectory, StoreIOError
from ..keyring import KeyHandle, KeyRing
from ..models import KeyInfo, KeyName
from ..secret import SecretBuffer, SecretDocument
from .permissions import AccessGuard, default_access_guard

KEY_FILE_SUFFIX = ".pem"

PRIVATE_KEY_BOUNDARY = pem.boundary(codec.PRIVATE_KEY_LABEL)
ENCRYPTED_PRIVATE_KEY_BOUNDARY = pem.boundary(codec.ENCRYPTED_PRIVATE_KEY_LABEL)

NameLike = Union[KeyName, str]

logger = structlog.get_logger(__name__)


@contextlib.contextmanager
def _io_errors(action: str, path: Path, *, key: Optional[KeyName] = None) -> Iterator[None]:
    """Translate ``OSError`` into the keystore error hierarchy"""
    try:
        yield
    except FileNotFoundError as exc:
        if key is not None:
            raise KeyNotFound(f"No key named {key!r} ({path})", exc) from exc
        raise StoreIOError(f"Cannot {action} {path}", exc) from exc
    except OSError as exc:
        raise StoreIOError(f"Cannot {action} {path}", exc) from exc


class FsKeyStore:
    """Filesystem-backed keystore: one ``<name>.pem`` PKCS#8 file per key.

    The root directory is canonicalized and its permissions checked once, when
    the store is opened. Operations are plain blocking syscalls with no
    locking: concurrent writers to one key are last-writer-wins, and a reader
    racing a writer may see a truncated file.
    """

    __slots__ = ("_path", "_guard")

    def __init__(self, path: Path, guard: AccessGuard) -> None:
        # Use open()/create()/create_or_open(); this does no validation
        self._path = path
        self._guard = guard

    @property
    def path(self) -> Path:
        return self._path

    @property
    def guard(self) -> AccessGuard:
        return self._guard

    # ----- Lifecycle -----
    @classmethod
    def create_or_open(
        cls, dir_path: Union[Path, str], *, guard: Optional[AccessGuard] = None
    ) -> FsKeyStore:
        """Open the keystore at ``dir_path``, creating it if it doesn't exist.

        Only a missing directory triggers creation; a directory with the wrong
        permissions is reported, never repaired.
        """
        try:
            return cls.open(dir_path, guard=guard)
        except StoreIOError as exc:
            if not exc.not_found:
                raise
        return cls.create(dir_path, guard=guard)

    @classmethod
    def create(
        cls, dir_path: Union[Path, str], *, guard: Optional[AccessGuard] = None
    ) -> FsKeyStore:
        """Create the keystore directory (and parents) and restrict its permissions"""
        guard = guard or default_access_guard()
        target = Path(dir_path).expanduser()
        with _io_errors("create directory", target):
            target.mkdir(parents=True, exist_ok=True)
        guard.grant_exclusive_access(target)
        logger.info("store.created", path=str(target), mode=oct(guard.mode))
        return cls.open(target, guard=guard)

    @classmethod
    def open(
        cls, dir_path: Union[Path, str], *, guard: Optional[AccessGuard] = None
    ) -> FsKeyStore:
        """Open an existing keystore, checking it is a directory with exclusive access"""
        guard = guard or default_access_guard()
        target = Path(dir_path).expanduser()
        with _io_errors("open keystore at", target):
            path = target.resolve(strict=True)
            st = path.stat()

        if not stat.S_ISDIR(st.st_mode):
            raise NotADirectory(path)

        guard.verify_exclusive_access(path)
        logger.debug("store.opened", path=str(path))
        return cls(path, guard)

    # ----- Key operations -----
    def info(self, name: NameLike) -> KeyInfo:
        """Describe a stored key without decrypting it"""
        key = KeyName(name)
        path = self.key_path(key)
        with _io_errors("read", path, key=key):
            buf = SecretBuffer.from_file(path)

        with buf:
            if buf.startswith(ENCRYPTED_PRIVATE_KEY_BOUNDARY):
                encrypted, algorithm = True, None
            elif buf.startswith(PRIVATE_KEY_BOUNDARY):
                encrypted = False
                label, document = pem.decode(buf)
                with document:
                    codec.validate_label(label)
                    algorithm = codec.decode_algorithm_identifier(document)
            else:
                raise KeyMalformed(f"{path} does not start with a PKCS#8 PEM boundary")

        logger.debug("key.info", key=str(key), encrypted=encrypted)
        return KeyInfo(name=key, algorithm=algorithm, encrypted=encrypted)

    def load(self, name: NameLike) -> SecretDocument:
        """Load the DER ``PrivateKeyInfo`` stored under ``name``"""
        key = KeyName(name)
        path = self.key_path(key)
        with _io_errors("read", path, key=key):
            label, document = codec.read_pem_file(path)
        try:
            codec.validate_label(label)
            codec.validate_document(document)
        except KeyMalformed:
            document.zeroize()
            raise
        logger.debug("key.loaded", key=str(key))
        return document

    def store(self, name: NameLike, document: SecretDocument) -> None:
        """Write ``document`` under ``name``, replacing any existing key"""
        key = KeyName(name)
        path = self.key_path(key)
        codec.validate_document(document)
        with _io_errors("write", path):
            codec.write_pem_file(path, document, codec.PRIVATE_KEY_LABEL)
        logger.info("key.stored", key=str(key), path=str(path))

    def delete(self, name: NameLike) -> None:
        key = KeyName(name)
        path = self.key_path(key)
        with _io_errors("delete", path, key=key):
            os.remove(path)
        logger.info("key.deleted", key=str(key), path=str(path))

    def import_key(self, name: NameLike, key_ring: KeyRing) -> KeyHandle:
        """Load a key and register it with ``key_ring``"""
        with self.load(name) as document:
            return key_ring.load_pkcs8(document)

    def key_path(self, name: NameLike) -> Path:
        """Path of the file backing ``name``; never touches the filesystem"""
        return self._path / f"{KeyName(name)}{KEY_FILE_SUFFIX}"

    def __repr__(self) -> str:
        return f"FsKeyStore({str(self._path)!r})"


__all__ = [
    "ENCRYPTED_PRIVATE_KEY_BOUNDARY",
    "FsKeyStore",
    "KEY_FILE_SUFFIX",
    "PRIVATE_KEY_BOUNDARY",
]
