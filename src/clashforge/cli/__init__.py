"""CLI entry point — Click group with global options."""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.markup import escape

from clashforge import __version__
from clashforge.config import ForgeConfig


@click.group()
@click.version_option(version=__version__, prog_name="clashforge")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """clashforge — build a complete Mihomo config from a base profile."""
    ctx.ensure_object(dict)
    try:
        config = ForgeConfig.load()
    except ValueError as exc:
        Console(stderr=True).print(f"[red]Error:[/red] {escape(str(exc))}")
        ctx.exit(1)
    config.verbose = verbose
    ctx.obj["config"] = config

    level = logging.DEBUG if config.verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _register_commands() -> None:
    from clashforge.cli.generate import generate  # noqa: F811
    from clashforge.cli.regions import regions  # noqa: F811
    from clashforge.cli.rules import rules  # noqa: F811

    main.add_command(generate)
    main.add_command(regions)
    main.add_command(rules)


_register_commands()
