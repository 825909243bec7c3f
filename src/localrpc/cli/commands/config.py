"""Inspect and initialise the localrpc configuration file."""

from __future__ import annotations

import click

from localrpc.config import ConfigError, LocalRPCConfig
from localrpc.paths import get_config_path


@click.group()
def config() -> None:
    """Manage the localrpc configuration file."""


@config.command()
def show() -> None:
    """Print the effective configuration as TOML."""
    path = get_config_path()
    try:
        cfg = LocalRPCConfig.load(path)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    source = str(path) if path.exists() else "defaults"
    click.echo(f"# source: {source}")
    click.echo(cfg.to_toml(), nl=False)


@config.command()
@click.option("--force", is_flag=True, help="Overwrite an existing configuration file.")
def init(force: bool) -> None:
    """Write the default configuration file."""
    path = get_config_path()
    if path.exists() and not force:
        raise click.ClickException(f"{path} already exists (use --force to overwrite)")

    written = LocalRPCConfig().save(path)
    click.secho(f"Wrote {written}", fg="green")
