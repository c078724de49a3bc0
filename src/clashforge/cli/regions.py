"""CLI command: clashforge regions <profile> — preview region buckets."""

from __future__ import annotations

import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from clashforge.cli.common import resolve_regions
from clashforge.config import ForgeConfig
from clashforge.loader import load_document
from clashforge.pipeline import read_endpoints

console = Console()


@click.command()
@click.argument("profile", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--regions",
    "regions_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML region table replacing the built-in one.",
)
@click.option("--extended-regions", is_flag=True, default=False)
@click.pass_context
def regions(
    ctx: click.Context,
    profile: str,
    regions_file: str | None,
    extended_regions: bool,
) -> None:
    """Show which region each proxy of PROFILE falls into."""
    config: ForgeConfig = ctx.obj["config"]
    if extended_regions:
        config.extended_regions = True

    try:
        region_table = resolve_regions(config, regions_file)
        endpoints = read_endpoints(load_document(profile))
    except (TypeError, ValueError) as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)

    buckets = region_table.partition([ep.name for ep in endpoints])
    if not buckets:
        console.print("[yellow]No proxies in profile.[/yellow]")
        return

    table = Table(title="Regions")
    table.add_column("Code", style="bold")
    table.add_column("Region", style="cyan")
    table.add_column("Proxies", justify="right")
    table.add_column("Members")
    for code, members in buckets.items():
        desc = region_table.get(code)
        table.add_row(code, desc.label, str(len(members)), ", ".join(members))
    console.print(table)
