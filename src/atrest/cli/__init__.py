"""Atrest CLI: put, get and rm for plain and encrypted files."""

from pathlib import Path

import click

from atrest import __version__

from .common import CONFIG_PATH, SECRETS_PATH


@click.group()
@click.version_option(version=__version__, package_name="atrest")
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=CONFIG_PATH,
    show_default=True,
    help="YAML or JSON storage configuration.",
)
@click.option(
    "--secrets",
    "secrets_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=SECRETS_PATH,
    show_default=True,
    help="YAML file holding crypto and S3 secrets.",
)
@click.option("-v", "--verbose", is_flag=True, help="Log each storage operation.")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write DEBUG logs to this rotating file.",
)
@click.pass_context
def main(ctx: click.Context, config_file: Path, secrets_file: Path, verbose: bool, log_file: Path | None) -> None:
    """Atrest: store files locally or on S3, optionally encrypted at rest."""
    from atrest.utils.logging import setup_logging

    setup_logging(verbose=verbose, log_file=log_file)
    ctx.obj = {"config_file": config_file, "secrets_file": secrets_file}


from .file_cmds import get, put, rm

main.add_command(put)
main.add_command(get)
main.add_command(rm)
