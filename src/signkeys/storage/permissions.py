"""Directory access guards, one per platform family.

A guard answers two questions for a keystore root: does the directory grant
access to anyone but its owner (``verify_exclusive_access``), and how to make
it so (``grant_exclusive_access``). The required mode is a policy value
passed at construction, so a group-shared store is a different guard rather
than a code change.
"""
from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import Protocol, runtime_checkable

from ..exceptions import PermissionViolation, StoreIOError, UnsupportedPlatform

REQUIRED_DIR_MODE = 0o700


@runtime_checkable
class AccessGuard(Protocol):
    mode: int

    def verify_exclusive_access(self, path: Path) -> None:
        ...

    def grant_exclusive_access(self, path: Path) -> None:
        ...


class PosixAccessGuard:
    """Enforce an exact permission-bit policy on POSIX systems"""

    def __init__(self, mode: int = REQUIRED_DIR_MODE) -> None:
        if mode & ~0o777:
            raise ValueError(f"Directory mode must fit in 0o777, got {oct(mode)}")
        self.mode = mode

    def verify_exclusive_access(self, path: Path) -> None:
        try:
            st = os.stat(path)
        except OSError as exc:
            raise StoreIOError(f"Cannot stat {path}", exc) from exc
        actual = stat.S_IMODE(st.st_mode) & 0o777
        if actual != self.mode:
            raise PermissionViolation(path, self.mode, actual)

    def grant_exclusive_access(self, path: Path) -> None:
        try:
            os.chmod(path, self.mode)
        except OSError as exc:
            raise StoreIOError(f"Cannot set permissions on {path}", exc) from exc

    def __repr__(self) -> str:
        return f"PosixAccessGuard(mode={oct(self.mode)})"


class UnsupportedAccessGuard:
    """Guard for platforms without POSIX mode bits; refuses every store"""

    def __init__(self, mode: int = REQUIRED_DIR_MODE, platform: str = os.name) -> None:
        self.mode = mode
        self.platform = platform

    def _refuse(self, path: Path) -> None:
        raise UnsupportedPlatform(
            f"Cannot enforce owner-only access for {path} on platform {self.platform!r}"
        )

    def verify_exclusive_access(self, path: Path) -> None:
        self._refuse(path)

    def grant_exclusive_access(self, path: Path) -> None:
        self._refuse(path)


def default_access_guard(mode: int = REQUIRED_DIR_MODE) -> AccessGuard:
    if os.name == "posix":
        return PosixAccessGuard(mode)
    # TODO: NTFS ACL guard (owner-only DACL) for Windows hosts
    return UnsupportedAccessGuard(mode)


__all__ = [
    "AccessGuard",
    "PosixAccessGuard",
    "REQUIRED_DIR_MODE",
    "UnsupportedAccessGuard",
    "default_access_guard",
]
