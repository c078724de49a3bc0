"""Tests for rule compilation and the static rule catalog."""

import pytest

from clashforge.groups.regions import DEFAULT_REGIONS
from clashforge.groups.synthesizer import FINAL, synthesize
from clashforge.rules.catalog import (
    DEFAULT_CATALOG,
    DEFAULT_CUSTOM_RULES,
    RuleCatalog,
    RuleCatalogError,
)
from clashforge.rules.compiler import RuleCompileError, compile_rules
from clashforge.rules.models import RuleEntry, RuleSource, Tier

URL = "http://www.gstatic.com/generate_204"


@pytest.fixture
def group_names() -> list[str]:
    return [g.name for g in synthesize([], DEFAULT_REGIONS, URL)]


def _rendered(tier: Tier) -> list[str]:
    return [e.render() for e in DEFAULT_CATALOG.tiers[tier]]


def test_rules_are_strict_tier_concatenation(group_names: list[str]):
    custom = ["DOMAIN-SUFFIX,example.com,代理模式", "DOMAIN-KEYWORD,intranet,DIRECT"]
    compiled = compile_rules(custom, targets=group_names)

    expected = (
        _rendered(Tier.BLOCK)
        + custom
        + _rendered(Tier.PROXY_DOMAIN)
        + _rendered(Tier.DIRECT_DOMAIN)
        + _rendered(Tier.IP_GEO)
        + [f"MATCH,{FINAL}"]
    )
    assert list(compiled.rules) == expected


def test_custom_rule_position(group_names: list[str]):
    custom = "DOMAIN-SUFFIX,example.com,代理模式"
    compiled = compile_rules([custom], targets=group_names)
    rules = list(compiled.rules)
    idx = rules.index(custom)

    block = _rendered(Tier.BLOCK)
    proxy = _rendered(Tier.PROXY_DOMAIN)
    assert rules[:idx] == block
    assert all(rules.index(line) > idx for line in proxy)


def test_terminal_rule_is_last_and_unique(group_names: list[str]):
    compiled = compile_rules(DEFAULT_CUSTOM_RULES, targets=group_names)
    terminals = [r for r in compiled.rules if r.startswith("MATCH,")]
    assert terminals == [f"MATCH,{FINAL}"]
    assert compiled.rules[-1] == f"MATCH,{FINAL}"


def test_tier_labels_align_with_rules(group_names: list[str]):
    compiled = compile_rules(["DOMAIN,a.example,DIRECT"], targets=group_names)
    assert len(compiled.tiers) == len(compiled.rules)
    assert compiled.tiers[-1] is None
    assert compiled.tiers[compiled.rules.index("DOMAIN,a.example,DIRECT")] is Tier.CUSTOM

    order = [t for t in compiled.tiers if t is not None]
    ranks = [list(Tier).index(t) for t in order]
    assert ranks == sorted(ranks)


def test_custom_rules_inserted_verbatim(group_names: list[str]):
    line = "IP-CIDR,192.168.0.0/16,DIRECT,no-resolve"
    compiled = compile_rules([line], targets=group_names)
    assert line in compiled.rules


def test_empty_custom_rules(group_names: list[str]):
    compiled = compile_rules([], targets=group_names)
    assert Tier.CUSTOM not in compiled.tiers


def test_unknown_target_rejected(group_names: list[str]):
    with pytest.raises(RuleCompileError, match="unknown group 'Nowhere'"):
        compile_rules(["DOMAIN,example.com,Nowhere"], targets=group_names)


def test_unknown_target_allowed_without_target_list():
    compiled = compile_rules(["DOMAIN,example.com,Nowhere"])
    assert "DOMAIN,example.com,Nowhere" in compiled.rules


def test_sentinel_targets_accepted(group_names: list[str]):
    compile_rules(["DOMAIN,a.com,DIRECT", "DOMAIN,b.com,REJECT"], targets=group_names)


def test_undeclared_rule_source_rejected(group_names: list[str]):
    with pytest.raises(RuleCompileError, match="undeclared rule source 'Missing'"):
        compile_rules(["RULE-SET,Missing,DIRECT"], targets=group_names)


def test_declared_rule_source_accepted(group_names: list[str]):
    compiled = compile_rules(["RULE-SET,Global_no_ip,DIRECT"], targets=group_names)
    assert "RULE-SET,Global_no_ip,DIRECT" in compiled.rules


def test_terminal_custom_rule_rejected(group_names: list[str]):
    with pytest.raises(RuleCompileError, match="terminal"):
        compile_rules(["MATCH,DIRECT"], targets=group_names)


def test_malformed_custom_rule_rejected():
    with pytest.raises(RuleCompileError, match="Invalid custom rule"):
        compile_rules(["NOT-A-MATCHER,foo,DIRECT"])


def test_missing_fixed_targets_rejected():
    with pytest.raises(RuleCompileError, match="not synthesized"):
        compile_rules([], targets=["代理模式"])


def test_every_referenced_source_is_declared(group_names: list[str]):
    compiled = compile_rules(DEFAULT_CUSTOM_RULES, targets=group_names)
    for line in compiled.rules:
        source = RuleEntry.parse(line).source
        if source is not None:
            assert source in compiled.sources


def test_providers_rendering():
    providers = compile_rules([]).providers()
    assert len(providers) == len(DEFAULT_CATALOG.sources)
    assert providers["AdBlock_REIJI007"]["interval"] == 86400
    assert providers["AdBlock_REIJI007"]["behavior"] == "domain"
    assert providers["AdBlock_REIJI007"]["format"] == "text"
    assert providers["China_ip"]["behavior"] == "ipcidr"
    assert providers["Global_no_ip"]["interval"] == 0
    assert providers["Global_no_ip"]["behavior"] == "classical"
    assert providers["Global_no_ip"]["path"].startswith("./ruleset/RealSeek/")


def test_block_tier_leads_with_ad_block_group():
    targets = [e.target for e in DEFAULT_CATALOG.tiers[Tier.BLOCK]]
    assert targets.count("广告拦截") >= 4


def test_ip_geo_tier_ends_before_terminal():
    last = DEFAULT_CATALOG.tiers[Tier.IP_GEO][-1]
    assert last.render() == "RULE-SET,China_ip,DIRECT"


def test_compile_is_repeatable(group_names: list[str]):
    first = compile_rules(DEFAULT_CUSTOM_RULES, targets=group_names)
    second = compile_rules(DEFAULT_CUSTOM_RULES, targets=group_names)
    assert first.rules == second.rules
    assert first.providers() == second.providers()


def _source(name: str) -> RuleSource:
    return RuleSource(name=name, url=f"https://example.com/{name}", path=f"./{name}.yaml")


def test_catalog_rejects_duplicate_source():
    with pytest.raises(RuleCatalogError, match="Duplicate rule source"):
        RuleCatalog([_source("a"), _source("a")], {})


def test_catalog_rejects_undeclared_source():
    with pytest.raises(RuleCatalogError, match="undeclared rule source"):
        RuleCatalog([_source("a")], {Tier.BLOCK: ("RULE-SET,b,REJECT",)})


def test_catalog_rejects_terminal_in_tier():
    with pytest.raises(RuleCatalogError, match="terminal"):
        RuleCatalog([], {Tier.IP_GEO: ("MATCH,DIRECT",)})


def test_catalog_rejects_custom_tier():
    with pytest.raises(RuleCatalogError, match="custom tier"):
        RuleCatalog([], {Tier.CUSTOM: ("DOMAIN,a.com,DIRECT",)})


def test_small_catalog_compiles():
    catalog = RuleCatalog(
        [_source("ads")],
        {Tier.BLOCK: ("RULE-SET,ads,REJECT",), Tier.IP_GEO: ("GEOIP,CN,DIRECT",)},
        final_target="DIRECT",
    )
    compiled = compile_rules(["DOMAIN,a.com,DIRECT"], targets=[], catalog=catalog)
    assert compiled.rules == (
        "RULE-SET,ads,REJECT",
        "DOMAIN,a.com,DIRECT",
        "GEOIP,CN,DIRECT",
        "MATCH,DIRECT",
    )
    assert list(compiled.sources) == ["ads"]
