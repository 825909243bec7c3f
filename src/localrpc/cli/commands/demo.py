"""Run the calculator walkthrough over a local transport pair."""

from __future__ import annotations

import asyncio

import click

from localrpc.config import ConfigError, LocalRPCConfig


@click.command()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Override the configured log level.",
)
def demo(log_level: str | None) -> None:
    """Connect an RPC client and server in-process and run a few calls."""
    from localrpc.demo import run_demo

    try:
        cfg = LocalRPCConfig.load()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    if log_level is not None:
        cfg.logging.level = log_level.upper()
    cfg.logging.apply()

    click.secho("localrpc local transport example", bold=True)
    asyncio.run(run_demo(cfg, echo=click.echo))
    click.secho("Connections closed", fg="green")
