"""Filesystem-backed PKCS#8 private key store for signing layers."""

from .exceptions import (
    ConfigError,
    InvalidKeyName,
    KeyMalformed,
    KeyNotFound,
    KeyRingError,
    NotADirectory,
    PermissionViolation,
    SignkeysError,
    StoreIOError,
    UnsupportedPlatform,
)
from .keyring import KeyHandle, KeyRing
from .models import Algorithm, KeyInfo, KeyName
from .secret import SecretBuffer, SecretDocument
from .storage import (
    AccessGuard,
    FsKeyStore,
    PosixAccessGuard,
    REQUIRED_DIR_MODE,
    UnsupportedAccessGuard,
    default_access_guard,
)
from .version import __version__

__all__ = [
    "AccessGuard",
    "Algorithm",
    "ConfigError",
    "FsKeyStore",
    "InvalidKeyName",
    "KeyHandle",
    "KeyInfo",
    "KeyMalformed",
    "KeyName",
    "KeyNotFound",
    "KeyRing",
    "KeyRingError",
    "NotADirectory",
    "PermissionViolation",
    "PosixAccessGuard",
    "REQUIRED_DIR_MODE",
    "SecretBuffer",
    "SecretDocument",
    "SignkeysError",
    "StoreIOError",
    "UnsupportedAccessGuard",
    "UnsupportedPlatform",
    "__version__",
    "default_access_guard",
]
