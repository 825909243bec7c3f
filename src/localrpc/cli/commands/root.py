"""Root CLI command registration."""

from __future__ import annotations

import click

from localrpc.version import get_localrpc_version

from .config import config
from .demo import demo


@click.group(invoke_without_command=True)
@click.option("--version", is_flag=True, help="Show version and exit")
@click.pass_context
def cli(ctx: click.Context, version: bool) -> None:
    """In-process client/server transports for JSON-RPC messaging."""
    if version:
        click.echo(f"localrpc {get_localrpc_version()}")
        ctx.exit(0)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


cli.add_command(demo)
cli.add_command(config)
