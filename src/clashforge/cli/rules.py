"""CLI command: clashforge rules — print the compiled rule order."""

from __future__ import annotations

import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from clashforge.cli.common import resolve_custom_rules
from clashforge.config import ForgeConfig
from clashforge.rules.compiler import compile_rules

console = Console()


@click.command()
@click.option(
    "--rules",
    "rules_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML list of custom rules inserted after the block rules.",
)
@click.pass_context
def rules(ctx: click.Context, rules_file: str | None) -> None:
    """List the compiled rules with the tier each one belongs to."""
    config: ForgeConfig = ctx.obj["config"]
    try:
        compiled = compile_rules(resolve_custom_rules(config, rules_file))
    except ValueError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)

    table = Table(title="Rules")
    table.add_column("#", justify="right")
    table.add_column("Tier", style="cyan")
    table.add_column("Rule")
    for idx, (line, tier) in enumerate(zip(compiled.rules, compiled.tiers), start=1):
        table.add_row(str(idx), tier.value if tier else "final", line)
    console.print(table)
    console.print(f"\n{len(compiled.rules)} rules, {len(compiled.sources)} rule sources")
