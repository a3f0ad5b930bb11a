"""atrest put / get / rm."""

from __future__ import annotations

import asyncio
from pathlib import Path

import click

from atrest.exceptions import AtRestError

from .common import load_storage


def _run(coro):
    try:
        return asyncio.run(coro)
    except AtRestError as e:
        raise click.ClickException(f"{type(e).__name__}: {e}") from e


@click.command()
@click.argument("key")
@click.argument("source", type=click.File("rb"))
@click.option("--encrypt", is_flag=True, help="Compress and encrypt before storing.")
@click.pass_context
def put(ctx: click.Context, key: str, source, encrypt: bool) -> None:
    """Store SOURCE (a file, or - for stdin) under KEY."""
    storage = load_storage(ctx)
    data = source.read()
    save = storage.save_crypto_file if encrypt else storage.save_file
    stored = _run(save(key, data))
    click.echo(f"Stored {len(data)} bytes at {stored.location}")


@click.command()
@click.argument("key")
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="Write to this file instead of stdout.",
)
@click.option("--decrypt", is_flag=True, help="Verify and decrypt a file stored with --encrypt.")
@click.pass_context
def get(ctx: click.Context, key: str, output: Path | None, decrypt: bool) -> None:
    """Fetch the file stored under KEY."""
    storage = load_storage(ctx)
    fetch = storage.get_crypto_file if decrypt else storage.get_file
    data = _run(fetch(key))
    if output is None:
        stream = click.get_binary_stream("stdout")
        stream.write(data)
        stream.flush()
    else:
        output.write_bytes(data)
        click.echo(f"Wrote {len(data)} bytes to {output}", err=True)


@click.command()
@click.argument("key")
@click.pass_context
def rm(ctx: click.Context, key: str) -> None:
    """Delete the file stored under KEY."""
    storage = load_storage(ctx)
    _run(storage.remove_file(key))
    click.echo(f"Removed {key}")
