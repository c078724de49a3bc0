"""CLI command: clashforge generate <profile> — write the full runtime config."""

from __future__ import annotations

import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from clashforge.cli.common import resolve_custom_rules, resolve_regions
from clashforge.config import ForgeConfig
from clashforge.loader import dump_document, load_document
from clashforge.pipeline import transform

console = Console(stderr=True)


@click.command()
@click.argument("profile", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    default=None,
    help="Output YAML file path (default: stdout).",
)
@click.option(
    "--rules",
    "rules_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML list of custom rules inserted after the block rules.",
)
@click.option(
    "--regions",
    "regions_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML region table replacing the built-in one.",
)
@click.option("--speed-test-url", default=None, help="URL probed by automatic groups.")
@click.option(
    "--extended-regions",
    is_flag=True,
    default=False,
    help="Also classify the less common regions (DE, UK, CA, ...).",
)
@click.pass_context
def generate(
    ctx: click.Context,
    profile: str,
    output: str | None,
    rules_file: str | None,
    regions_file: str | None,
    speed_test_url: str | None,
    extended_regions: bool,
) -> None:
    """Transform a base profile into a complete runtime config."""
    config: ForgeConfig = ctx.obj["config"]
    if speed_test_url:
        config.speed_test_url = speed_test_url
    if extended_regions:
        config.extended_regions = True

    try:
        document = load_document(profile)
        regions = resolve_regions(config, regions_file)
        custom_rules = resolve_custom_rules(config, rules_file)
        transform(document, config=config, regions=regions, custom_rules=custom_rules)
    except (TypeError, ValueError) as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)

    text = dump_document(document)
    if output:
        Path(output).write_text(text, encoding="utf-8")
        console.print(f"[green]Config written to {output}[/green]")
    else:
        click.echo(text, nl=False)

    _print_summary(document)


def _print_summary(document: dict) -> None:
    table = Table(title="Summary", show_header=False)
    table.add_column("Section", style="cyan")
    table.add_column("Count", justify="right")
    table.add_row("proxies", str(len(document.get("proxies") or [])))
    table.add_row("proxy-groups", str(len(document["proxy-groups"])))
    table.add_row("rules", str(len(document["rules"])))
    table.add_row("rule-providers", str(len(document["rule-providers"])))
    console.print(table)
