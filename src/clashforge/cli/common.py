"""Helpers shared by CLI commands."""

from __future__ import annotations

from pathlib import Path

from clashforge.config import ForgeConfig
from clashforge.groups.regions import DEFAULT_REGIONS, EXTENDED_REGIONS, RegionTable
from clashforge.loader import load_custom_rules, load_region_table
from clashforge.rules.catalog import DEFAULT_CUSTOM_RULES


def resolve_regions(config: ForgeConfig, regions_file: str | None) -> RegionTable:
    """Region table precedence: --regions, config dir file, built-in tables."""
    if regions_file:
        return load_region_table(regions_file)
    if config.regions_path is not None:
        return load_region_table(config.regions_path)
    return EXTENDED_REGIONS if config.extended_regions else DEFAULT_REGIONS


def resolve_custom_rules(config: ForgeConfig, rules_file: str | None) -> list[str]:
    """Custom rule precedence: --rules, config dir file, built-in defaults."""
    if rules_file:
        return load_custom_rules(Path(rules_file))
    if config.custom_rules_path is not None:
        return load_custom_rules(config.custom_rules_path)
    return list(DEFAULT_CUSTOM_RULES)
