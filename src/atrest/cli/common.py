"""Shared setup logic for CLI commands."""

from __future__ import annotations

from pathlib import Path

import click

from atrest.exceptions import AtRestError

ATREST_DIR = Path.home() / ".atrest"
CONFIG_PATH = ATREST_DIR / "config.yaml"
SECRETS_PATH = ATREST_DIR / "secrets.yaml"


def load_storage(ctx: click.Context):
    """Build the storage facade from the files named on the command line."""
    from atrest.config import Config
    from atrest.facade import create_storage
    from atrest.secrets import EnvProvider, SecretsManager, YamlFileProvider

    config = Config(config_file=str(ctx.obj["config_file"]))
    secrets = SecretsManager(providers=[EnvProvider(), YamlFileProvider(ctx.obj["secrets_file"])])
    try:
        return create_storage(config.settings(secrets=secrets))
    except AtRestError as e:
        raise click.ClickException(str(e)) from e
