"""Typer-based command line interface for signkeys."""
from __future__ import annotations

import json
from pathlib import Path
from typing import NoReturn, Optional

import click
import typer

from ..codec import PRIVATE_KEY_LABEL, pem, validate_label
from ..config import AppConfig, dump_config, load_config
from ..exceptions import SignkeysError
from ..logging import configure_logging
from ..secret import SecretBuffer
from ..storage import FsKeyStore

app = typer.Typer(help="Filesystem PKCS#8 keystore")


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, "--config", metavar="PATH"),
    store: Optional[Path] = typer.Option(None, "--store", metavar="DIR", help="Override keystore directory"),
) -> None:
    try:
        app_config = load_config(config)
    except SignkeysError as exc:
        _fail(exc)
    if store is not None:
        app_config.store.path = store.expanduser()
    ctx.obj = app_config
    configure_logging(app_config.logging.normalized_level())


def _fail(exc: SignkeysError) -> NoReturn:
    typer.echo(f"error: {exc}", err=True)
    raise typer.Exit(code=1)


def _open_store() -> FsKeyStore:
    config: AppConfig = click.get_current_context().obj
    return FsKeyStore.open(config.store.path, guard=config.store.access_guard())


@app.command()
def init(
    write_config: Optional[Path] = typer.Option(
        None, "--write-config", metavar="PATH", help="Also save the effective configuration as YAML"
    ),
) -> None:
    """Create the keystore directory, or validate an existing one"""
    config: AppConfig = click.get_current_context().obj
    try:
        keystore = FsKeyStore.create_or_open(config.store.path, guard=config.store.access_guard())
        if write_config is not None:
            dump_config(write_config.expanduser(), config)
    except SignkeysError as exc:
        _fail(exc)
    typer.echo(str(keystore.path))


@app.command()
def info(name: str = typer.Argument(..., help="Key name")) -> None:
    """Show algorithm and encryption status of a stored key"""
    try:
        key_info = _open_store().info(name)
    except SignkeysError as exc:
        _fail(exc)
    typer.echo(json.dumps(key_info.as_dict(), indent=2))


@app.command()
def store(
    name: str = typer.Argument(..., help="Key name"),
    source: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Unencrypted PKCS#8 PEM file"),
) -> None:
    """Copy a PKCS#8 private key into the keystore"""
    try:
        keystore = _open_store()
        with SecretBuffer.from_file(source) as buf:
            label, document = pem.decode(buf)
        with document:
            validate_label(label, PRIVATE_KEY_LABEL)
            keystore.store(name, document)
    except OSError as exc:
        typer.echo(f"error: cannot read {source}: {exc.strerror or exc}", err=True)
        raise typer.Exit(code=1)
    except SignkeysError as exc:
        _fail(exc)
    typer.echo(f"Stored {name}")


@app.command()
def delete(name: str = typer.Argument(..., help="Key name")) -> None:
    """Remove a key from the keystore"""
    try:
        _open_store().delete(name)
    except SignkeysError as exc:
        _fail(exc)
    typer.echo(f"Deleted {name}")


@app.command()
def version() -> None:
    from ..version import __version__

    typer.echo(f"signkeys {__version__}")


if __name__ == "__main__":  # pragma: no cover
    app()
