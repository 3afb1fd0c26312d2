from .fs import FsKeyStore
from .permissions import (
    AccessGuard,
    PosixAccessGuard,
    REQUIRED_DIR_MODE,
    UnsupportedAccessGuard,
    default_access_guard,
)

__all__ = [
    "AccessGuard",
    "FsKeyStore",
    "PosixAccessGuard",
    "REQUIRED_DIR_MODE",
    "UnsupportedAccessGuard",
    "default_access_guard",
]
