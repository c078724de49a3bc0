"""Rule compiler — merges the fixed tiers and caller rules into one list.

Order is block > custom > proxy-domain > direct-domain > ip-geo, followed by
exactly one terminal ``MATCH`` entry. The engine stops at the first matching
line, so the order is part of the output's meaning.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable
from dataclasses import dataclass, field
from typing import Any

from clashforge.groups.models import SENTINELS
from clashforge.rules.catalog import DEFAULT_CATALOG, RuleCatalog
from clashforge.rules.models import RuleEntry, RuleSource, RuleSyntaxError, Tier

logger = logging.getLogger(__name__)


class RuleCompileError(ValueError):
    """A rule references a target or rule source that does not exist."""


@dataclass(frozen=True)
class CompiledRules:
    """The ordered rule lines plus the rule-source registry they rely on."""

    rules: tuple[str, ...]
    sources: dict[str, RuleSource]
    tiers: tuple[Tier | None, ...] = field(default=(), compare=False)

    def providers(self) -> dict[str, dict[str, Any]]:
        """Render ``sources`` as the engine's ``rule-providers`` mapping."""
        return {name: source.to_dict() for name, source in self.sources.items()}


def compile_rules(
    custom_rules: Iterable[str],
    targets: Collection[str] | None = None,
    catalog: RuleCatalog = DEFAULT_CATALOG,
) -> CompiledRules:
    """Compile the final rule list.

    ``custom_rules`` are inserted verbatim in the custom tier. When
    ``targets`` is given, every rule target (fixed and custom) must be one of
    those names or an engine sentinel; otherwise a ``RuleCompileError`` is
    raised before anything is emitted.
    """
    custom_lines = list(custom_rules)
    custom_entries: list[RuleEntry] = []
    for line in custom_lines:
        try:
            entry = RuleEntry.parse(line)
        except RuleSyntaxError as exc:
            raise RuleCompileError(f"Invalid custom rule {line!r}: {exc}") from exc
        if entry.is_terminal:
            raise RuleCompileError(f"Custom rules cannot contain a terminal rule: {line!r}")
        if entry.source is not None and entry.source not in catalog.sources:
            raise RuleCompileError(
                f"Custom rule {line!r} references undeclared rule source {entry.source!r}"
            )
        custom_entries.append(entry)

    if targets is not None:
        allowed = set(targets) | SENTINELS
        for line, entry in zip(custom_lines, custom_entries):
            if entry.target not in allowed:
                raise RuleCompileError(
                    f"Custom rule {line!r} targets unknown group {entry.target!r}"
                )
        missing = sorted(catalog.targets() - allowed)
        if missing:
            raise RuleCompileError(
                "Fixed rules target groups that were not synthesized: " + ", ".join(missing)
            )
    else:
        logger.debug("No target list given; rule targets are left to the engine to check")

    rules: list[str] = []
    tiers: list[Tier | None] = []

    def _extend(tier: Tier, lines: Iterable[str]) -> None:
        for line in lines:
            rules.append(line)
            tiers.append(tier)

    _extend(Tier.BLOCK, (e.render() for e in catalog.tiers[Tier.BLOCK]))
    _extend(Tier.CUSTOM, custom_lines)
    _extend(Tier.PROXY_DOMAIN, (e.render() for e in catalog.tiers[Tier.PROXY_DOMAIN]))
    _extend(Tier.DIRECT_DOMAIN, (e.render() for e in catalog.tiers[Tier.DIRECT_DOMAIN]))
    _extend(Tier.IP_GEO, (e.render() for e in catalog.tiers[Tier.IP_GEO]))
    rules.append(catalog.terminal.render())
    tiers.append(None)

    unused = sorted(set(catalog.sources) - catalog.referenced_sources())
    if unused:
        logger.debug("Declared rule sources not referenced by fixed rules: %s", ", ".join(unused))

    logger.info(
        "Compiled %d rule(s) (%d custom) over %d rule source(s)",
        len(rules),
        len(custom_lines),
        len(catalog.sources),
    )
    return CompiledRules(rules=tuple(rules), sources=dict(catalog.sources), tiers=tuple(tiers))
