"""Configuration loading utilities for signkeys."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigError
from .paths import default_store_dir, runtime_config_dir
from .storage.permissions import REQUIRED_DIR_MODE, AccessGuard, default_access_guard


class StoreConfig(BaseModel):
    path: Path = Field(default_factory=default_store_dir, description="Keystore root directory")
    dir_mode: int = Field(default=REQUIRED_DIR_MODE, description="Required directory permission bits")

    @field_validator("path")
    @classmethod
    def _expand_path(cls, value: Path) -> Path:
        return value.expanduser()

    @field_validator("dir_mode", mode="before")
    @classmethod
    def _parse_mode(cls, value: object) -> object:
        # Quoted octal strings such as "0750" or "0o750"
        if isinstance(value, str):
            try:
                return int(value, 8)
            except ValueError:
                raise ValueError(f"dir_mode must be an octal string, got {value!r}") from None
        return value

    @field_validator("dir_mode")
    @classmethod
    def _validate_mode(cls, value: int) -> int:
        if value < 0 or value & ~0o777:
            raise ValueError(f"dir_mode must fit in 0o777, got {oct(value)}")
        if value & 0o700 != 0o700:
            raise ValueError(f"dir_mode must grant the owner rwx, got {oct(value)}")
        return value

    def access_guard(self) -> AccessGuard:
        return default_access_guard(self.dir_mode)


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="Logging verbosity level")

    def normalized_level(self) -> str:
        return self.level.upper()


class AppConfig(BaseModel):
    store: StoreConfig = Field(default_factory=StoreConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def config_search_paths(explicit: Optional[Path] = None) -> Iterable[Path]:
    if explicit:
        yield explicit
    yield Path.cwd() / ".signkeys" / "config.yaml"
    yield runtime_config_dir() / "config.yaml"


def load_config(path: Optional[Path] = None) -> AppConfig:
    for candidate in config_search_paths(path):
        if candidate.is_file():
            try:
                with candidate.open("r", encoding="utf-8") as handle:
                    data = yaml.safe_load(handle) or {}
            except yaml.YAMLError as exc:
                raise ConfigError(f"Invalid YAML in {candidate}: {exc}") from exc
            try:
                return AppConfig.model_validate(data)
            except ValidationError as exc:
                raise ConfigError(f"Invalid configuration in {candidate}: {exc}") from exc
    return AppConfig()


def dump_config(target: Path, config: Optional[AppConfig] = None) -> None:
    """Write ``config`` (defaults when omitted) as YAML, refusing to overwrite"""
    config = config or AppConfig()
    data = config.model_dump(mode="json")
    data["store"]["dir_mode"] = oct(config.store.dir_mode)[2:].zfill(4)
    target.parent.mkdir(parents=True, exist_ok=True)
    try:
        with target.open("x", encoding="utf-8") as handle:
            yaml.safe_dump(data, handle, sort_keys=False)
    except FileExistsError as exc:
        raise ConfigError(f"Refusing to overwrite existing config {target}") from exc


__all__ = [
    "AppConfig",
    "LoggingConfig",
    "StoreConfig",
    "config_search_paths",
    "dump_config",
    "load_config",
]
