"""Shared filesystem path helpers for signkeys."""
from __future__ import annotations

import os
from pathlib import Path

from platformdirs import PlatformDirs

_APP_NAME = "signkeys"
_STORE_ENV = "SIGNKEYS_STORE_DIR"


def _dirs() -> PlatformDirs:
    return PlatformDirs(appname=_APP_NAME, appauthor=False, roaming=False)


def runtime_config_dir() -> Path:
    """Return the per-user configuration directory."""
    return Path(_dirs().user_config_path)


def default_store_dir() -> Path:
    """Return the keystore root: ``$SIGNKEYS_STORE_DIR`` or the per-user data dir."""
    value = os.getenv(_STORE_ENV)
    if value:
        return Path(value).expanduser()
    return Path(_dirs().user_data_path) / "keys"
