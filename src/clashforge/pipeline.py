"""The transformation pipeline — five stages over one mutable document.

Stages run strictly in order and each writes its own section:

    options  -> root keys (merged)
    sniffer  -> ``sniffer``
    groups   -> ``proxy-groups``
    rules    -> ``rules`` and ``rule-providers``
    dns/tun  -> ``dns`` and ``tun``

Nothing is cached between calls, so running ``transform`` twice on equal
documents produces equal output.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, MutableMapping, Sequence
from typing import Any

from clashforge.config import ForgeConfig
from clashforge.groups.graph import validate_group_graph
from clashforge.groups.models import Endpoint
from clashforge.groups.regions import DEFAULT_REGIONS, EXTENDED_REGIONS, RegionTable
from clashforge.groups.synthesizer import synthesize
from clashforge.overlays import (
    BasicOptions,
    DnsSettings,
    SnifferSettings,
    TunSettings,
    apply_overlay,
)
from clashforge.rules.catalog import DEFAULT_CATALOG, DEFAULT_CUSTOM_RULES, RuleCatalog
from clashforge.rules.compiler import compile_rules

logger = logging.getLogger(__name__)


def read_endpoints(document: MutableMapping[str, Any]) -> list[Endpoint]:
    """Return the document's endpoints, warning when there are none."""
    raw = document.get("proxies")
    is_sequence = isinstance(raw, Sequence) and not isinstance(raw, (str, bytes))
    if raw is None or (is_sequence and not raw):
        logger.warning("No proxies found in the document; proxy groups will be empty")
        return []
    if not is_sequence:
        raise TypeError(f"'proxies' must be a sequence, got {type(raw).__name__}")

    endpoints: list[Endpoint] = []
    seen: set[str] = set()
    for record in raw:
        endpoint = Endpoint.from_mapping(record)
        if endpoint.name in seen:
            raise ValueError(f"Duplicate endpoint name: {endpoint.name}")
        seen.add(endpoint.name)
        endpoints.append(endpoint)
    return endpoints


def transform(
    document: MutableMapping[str, Any],
    config: ForgeConfig | None = None,
    regions: RegionTable | None = None,
    custom_rules: Iterable[str] | None = None,
    catalog: RuleCatalog = DEFAULT_CATALOG,
) -> MutableMapping[str, Any]:
    """Rewrite ``document`` in place into a complete runtime config and return it."""
    if not isinstance(document, MutableMapping):
        raise TypeError(f"Document must be a mapping, got {type(document).__name__}")

    config = config or ForgeConfig()
    if regions is None:
        regions = EXTENDED_REGIONS if config.extended_regions else DEFAULT_REGIONS
    rules_in = tuple(DEFAULT_CUSTOM_RULES if custom_rules is None else custom_rules)

    endpoints = read_endpoints(document)

    apply_overlay(document, BasicOptions(mixed_port=config.mixed_port).to_dict())
    apply_overlay(document, SnifferSettings().to_dict(), key="sniffer")

    groups = synthesize(endpoints, regions, config.speed_test_url)
    validate_group_graph(groups, [ep.name for ep in endpoints])
    document["proxy-groups"] = [group.to_dict() for group in groups]

    compiled = compile_rules(rules_in, targets=[g.name for g in groups], catalog=catalog)
    document["rules"] = list(compiled.rules)
    document["rule-providers"] = compiled.providers()

    apply_overlay(document, DnsSettings(listen_port=config.dns_listen_port).to_dict(), key="dns")
    apply_overlay(document, TunSettings(dns_port=config.dns_listen_port).to_dict(), key="tun")

    logger.info(
        "Transformed document: %d endpoint(s), %d group(s), %d rule(s)",
        len(endpoints),
        len(groups),
        len(compiled.rules),
    )
    return document
