from __future__ import annotations

from pathlib import Path

import pytest

from signkeys import ConfigError, PosixAccessGuard, REQUIRED_DIR_MODE
from signkeys.config import AppConfig, dump_config, load_config


def test_defaults(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("SIGNKEYS_STORE_DIR", str(tmp_path / "store"))
    config = AppConfig()
    assert config.store.path == tmp_path / "store"
    assert config.store.dir_mode == REQUIRED_DIR_MODE
    assert config.logging.normalized_level() == "INFO"


def test_load_explicit_file(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(
        f'store:\n  path: "{tmp_path / "keys"}"\n  dir_mode: "0750"\nlogging:\n  level: debug\n',
        encoding="utf-8",
    )
    config = load_config(path)
    assert config.store.path == tmp_path / "keys"
    assert config.store.dir_mode == 0o750
    assert config.logging.normalized_level() == "DEBUG"


def test_yaml_octal_literal(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("store:\n  dir_mode: 0750\n", encoding="utf-8")
    assert load_config(path).store.dir_mode == 0o750


@pytest.mark.parametrize("mode", ['"0600"', '"1777"', '"seven"'])
def test_rejects_bad_modes(tmp_path: Path, mode: str) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(f"store:\n  dir_mode: {mode}\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path)


def test_access_guard_uses_mode(tmp_path: Path) -> None:
    config = AppConfig.model_validate({"store": {"path": str(tmp_path), "dir_mode": 0o750}})
    guard = config.store.access_guard()
    assert guard.mode == 0o750
    if isinstance(guard, PosixAccessGuard):
        assert repr(guard) == "PosixAccessGuard(mode=0o750)"


def test_invalid_yaml_is_config_error(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("store: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path)


def test_dump_default_config_round_trips(tmp_path: Path) -> None:
    target = tmp_path / "out" / "config.yaml"
    dump_config(target)
    assert load_config(target).store.dir_mode == REQUIRED_DIR_MODE


def test_dump_config_keeps_custom_values(tmp_path: Path) -> None:
    config = AppConfig.model_validate({"store": {"path": str(tmp_path / "keys"), "dir_mode": 0o750}})
    target = tmp_path / "config.yaml"
    dump_config(target, config)
    assert "dir_mode: '0750'" in target.read_text(encoding="utf-8")
    assert load_config(target) == config


def test_dump_config_refuses_overwrite(tmp_path: Path) -> None:
    target = tmp_path / "config.yaml"
    target.write_text("logging:\n  level: debug\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        dump_config(target)
    assert load_config(target).logging.level == "debug"
