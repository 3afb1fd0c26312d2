from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
import structlog
from typer.testing import CliRunner

from conftest import pkcs8_pem
from signkeys.cli.main import app
from signkeys.config import load_config

runner = CliRunner()


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    structlog.reset_defaults()
    logging.basicConfig(handlers=[logging.NullHandler()], force=True)


def _invoke(store: Path, *args: str):
    return runner.invoke(app, ["--store", str(store), *args])


def test_version() -> None:
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert result.stdout.strip().startswith("signkeys")


def test_init_store_info_delete(tmp_path: Path, ed25519_key) -> None:
    store_dir = tmp_path / "keys"
    source = tmp_path / "validator.pem"
    source.write_bytes(pkcs8_pem(ed25519_key))

    result = _invoke(store_dir, "init")
    assert result.exit_code == 0, result.output
    assert str(store_dir.resolve()) in result.stdout.splitlines()

    result = _invoke(store_dir, "store", "validator", str(source))
    assert result.exit_code == 0, result.output
    assert (store_dir / "validator.pem").read_bytes() == source.read_bytes()

    result = _invoke(store_dir, "info", "validator")
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == {
        "name": "validator",
        "algorithm": "ed25519",
        "encrypted": False,
    }

    result = _invoke(store_dir, "delete", "validator")
    assert result.exit_code == 0, result.output
    assert not (store_dir / "validator.pem").exists()


def test_missing_key_exits_nonzero(tmp_path: Path) -> None:
    store_dir = tmp_path / "keys"
    assert _invoke(store_dir, "init").exit_code == 0
    result = _invoke(store_dir, "info", "ghost")
    assert result.exit_code == 1


def test_uninitialized_store_exits_nonzero(tmp_path: Path) -> None:
    result = _invoke(tmp_path / "missing", "info", "anything")
    assert result.exit_code == 1


def test_store_rejects_encrypted_source(tmp_path: Path, ed25519_key) -> None:
    store_dir = tmp_path / "keys"
    source = tmp_path / "locked.pem"
    source.write_bytes(pkcs8_pem(ed25519_key, passphrase=b"pw"))
    assert _invoke(store_dir, "init").exit_code == 0
    result = _invoke(store_dir, "store", "locked", str(source))
    assert result.exit_code == 1
    assert not (store_dir / "locked.pem").exists()


def test_init_writes_config(tmp_path: Path) -> None:
    store_dir = tmp_path / "keys"
    target = tmp_path / "conf" / "config.yaml"
    result = _invoke(store_dir, "init", "--write-config", str(target))
    assert result.exit_code == 0, result.output
    assert load_config(target).store.path == store_dir

    result = _invoke(store_dir, "init", "--write-config", str(target))
    assert result.exit_code == 1


def test_invalid_config_file_reports_error(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text("store: [unclosed\n", encoding="utf-8")
    result = runner.invoke(app, ["--config", str(config_path), "version"])
    assert result.exit_code == 1
    assert "error:" in result.output
