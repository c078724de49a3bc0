"""Tests for rule entry parsing and rule source rendering."""

import pytest

from clashforge.rules.models import Behavior, RuleEntry, RuleSource, RuleSyntaxError, SourceFormat


def test_parse_basic_rule():
    entry = RuleEntry.parse("DOMAIN-SUFFIX,example.com,代理模式")
    assert entry.matcher == "DOMAIN-SUFFIX"
    assert entry.value == "example.com"
    assert entry.target == "代理模式"
    assert entry.options == ()
    assert entry.source is None
    assert not entry.is_terminal


def test_parse_rule_set_reference():
    entry = RuleEntry.parse("RULE-SET,AI_no_ip,AI")
    assert entry.source == "AI_no_ip"
    assert entry.target == "AI"


def test_parse_rule_with_options():
    entry = RuleEntry.parse("IP-CIDR,10.0.0.0/8,DIRECT,no-resolve")
    assert entry.target == "DIRECT"
    assert entry.options == ("no-resolve",)
    assert entry.render() == "IP-CIDR,10.0.0.0/8,DIRECT,no-resolve"


def test_parse_terminal_rule():
    entry = RuleEntry.parse("MATCH,漏网之鱼")
    assert entry.is_terminal
    assert entry.target == "漏网之鱼"
    assert entry.render() == "MATCH,漏网之鱼"


def test_parse_logic_rule_keeps_nested_commas():
    entry = RuleEntry.parse("AND,((DOMAIN,baidu.com),(NETWORK,UDP)),DIRECT")
    assert entry.matcher == "AND"
    assert entry.value == "((DOMAIN,baidu.com),(NETWORK,UDP))"
    assert entry.target == "DIRECT"


def test_matcher_is_case_insensitive():
    assert RuleEntry.parse("geoip,CN,DIRECT").matcher == "GEOIP"


@pytest.mark.parametrize(
    "line",
    ["", "BOGUS,foo,DIRECT", "DOMAIN,example.com", "DOMAIN,example.com,", "MATCH"],
)
def test_parse_rejects_malformed_lines(line: str):
    with pytest.raises(RuleSyntaxError):
        RuleEntry.parse(line)


def test_rule_source_to_dict():
    source = RuleSource(
        name="Lan",
        url="https://example.com/lan.txt",
        path="./ruleset/lan.txt",
        behavior=Behavior.IPCIDR,
        format=SourceFormat.TEXT,
        interval=3600,
    )
    assert source.to_dict() == {
        "type": "http",
        "interval": 3600,
        "behavior": "ipcidr",
        "format": "text",
        "url": "https://example.com/lan.txt",
        "path": "./ruleset/lan.txt",
    }


def test_rule_source_defaults():
    source = RuleSource(name="x", url="u", path="p")
    assert source.interval == 0
    assert source.behavior is Behavior.CLASSICAL
    assert source.format is SourceFormat.YAML
