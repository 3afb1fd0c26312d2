from __future__ import annotations

"""Central exception hierarchy"""
import errno as _errno
from pathlib import Path


class SignkeysError(Exception):
    """Base exception for all failures"""


class NotADirectory(SignkeysError):
    """Raised when a keystore root resolves to something other than a directory"""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Keystore path is not a directory: {path}")
        self.path = path


class PermissionViolation(SignkeysError):
    """Raised when a keystore directory grants access beyond its owner"""

    def __init__(self, path: Path, expected: int, actual: int) -> None:
        super().__init__(
            f"Insecure permissions on {path}: expected {oct(expected)}, found {oct(actual)}"
        )
        self.path = path
        self.expected = expected
        self.actual = actual


class StoreIOError(SignkeysError):
    """Raised when a filesystem operation fails; wraps the underlying OSError"""

    def __init__(self, message: str, cause: OSError) -> None:
        super().__init__(f"{message}: {cause.strerror or cause}")
        self.cause = cause

    @property
    def errno(self) -> int | None:
        return self.cause.errno

    @property
    def not_found(self) -> bool:
        return isinstance(self.cause, FileNotFoundError) or self.cause.errno == _errno.ENOENT


class KeyNotFound(StoreIOError):
    """Raised when no key file exists for a key name"""


class KeyMalformed(SignkeysError):
    """Raised when key file content is not a well-formed PKCS#8 PEM document"""


class InvalidKeyName(SignkeysError, ValueError):
    """Raised when a key name cannot be used as a file name component"""


class UnsupportedPlatform(SignkeysError):
    """Raised when directory access cannot be enforced on this platform"""


class KeyRingError(SignkeysError):
    """Raised for unknown handles or unsupported key types in a key ring"""


class ConfigError(SignkeysError, ValueError):
    """Raised when a configuration file fails validation"""


__all__ = [
    "SignkeysError",
    "NotADirectory",
    "PermissionViolation",
    "StoreIOError",
    "KeyNotFound",
    "KeyMalformed",
    "InvalidKeyName",
    "UnsupportedPlatform",
    "KeyRingError",
    "ConfigError",
]
