"""Rule data models — rule entries, rule sources and precedence tiers."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

RULE_SET = "RULE-SET"
MATCH = "MATCH"

# Matchers whose payload is a parenthesised rule list containing commas.
LOGIC_MATCHERS = frozenset({"AND", "OR", "NOT"})

MATCHERS = frozenset(
    {
        "DOMAIN",
        "DOMAIN-SUFFIX",
        "DOMAIN-KEYWORD",
        "DOMAIN-REGEX",
        "DOMAIN-WILDCARD",
        "GEOSITE",
        "GEOIP",
        "SRC-GEOIP",
        "IP-ASN",
        "SRC-IP-ASN",
        "IP-CIDR",
        "IP-CIDR6",
        "SRC-IP-CIDR",
        "IP-SUFFIX",
        "SRC-IP-SUFFIX",
        "DST-PORT",
        "SRC-PORT",
        "IN-PORT",
        "IN-TYPE",
        "IN-USER",
        "IN-NAME",
        "PROCESS-NAME",
        "PROCESS-PATH",
        "PROCESS-NAME-REGEX",
        "PROCESS-PATH-REGEX",
        "UID",
        "NETWORK",
        "DSCP",
        "SUB-RULE",
        RULE_SET,
        MATCH,
    }
    | LOGIC_MATCHERS
)


class RuleSyntaxError(ValueError):
    """A rule line cannot be parsed."""


class Tier(enum.Enum):
    """Precedence tiers of the compiled rule list, highest first."""

    BLOCK = "block"
    CUSTOM = "custom"
    PROXY_DOMAIN = "proxy-domain"
    DIRECT_DOMAIN = "direct-domain"
    IP_GEO = "ip-geo"


class Behavior(enum.Enum):
    """Content behavior of a rule source."""

    DOMAIN = "domain"
    IPCIDR = "ipcidr"
    CLASSICAL = "classical"


class SourceFormat(enum.Enum):
    YAML = "yaml"
    TEXT = "text"
    MRS = "mrs"


@dataclass(frozen=True)
class RuleEntry:
    """One line of the ordered decision list."""

    matcher: str
    value: str
    target: str
    options: tuple[str, ...] = ()

    @property
    def is_terminal(self) -> bool:
        return self.matcher == MATCH

    @property
    def source(self) -> str | None:
        """Name of the referenced rule source, if this is a ``RULE-SET`` entry."""
        return self.value if self.matcher == RULE_SET else None

    def render(self) -> str:
        fields = [self.matcher] if self.is_terminal else [self.matcher, self.value]
        fields.append(self.target)
        fields.extend(self.options)
        return ",".join(fields)

    @classmethod
    def parse(cls, line: str) -> RuleEntry:
        """Parse ``MATCHER,value,target[,option...]`` or ``MATCH,target``."""
        fields = _split_fields(line)
        matcher = fields[0].strip().upper() if fields else ""
        if matcher not in MATCHERS:
            raise RuleSyntaxError(f"Unknown rule matcher in {line!r}")

        if matcher == MATCH:
            if len(fields) < 2 or not fields[1].strip():
                raise RuleSyntaxError(f"MATCH rule has no target: {line!r}")
            return cls(matcher=MATCH, value="", target=fields[1].strip(), options=tuple(fields[2:]))

        if len(fields) < 3:
            raise RuleSyntaxError(f"Rule needs MATCHER,value,target: {line!r}")
        target = fields[2].strip()
        if not target:
            raise RuleSyntaxError(f"Rule has an empty target: {line!r}")
        return cls(
            matcher=matcher,
            value=fields[1].strip(),
            target=target,
            options=tuple(f.strip() for f in fields[3:]),
        )


def _split_fields(line: str) -> list[str]:
    """Split on commas that are not inside parentheses."""
    fields: list[str] = []
    depth = 0
    current: list[str] = []
    for ch in line:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(depth - 1, 0)
        if ch == "," and depth == 0:
            fields.append("".join(current))
            current = []
            continue
        current.append(ch)
    fields.append("".join(current))
    return fields


@dataclass(frozen=True)
class RuleSource:
    """An externally hosted rule bundle, fetched and cached by the engine.

    ``interval`` is the refresh period in seconds; 0 means fetch once.
    """

    name: str
    url: str
    path: str
    behavior: Behavior = Behavior.CLASSICAL
    format: SourceFormat = SourceFormat.YAML
    interval: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "http",
            "interval": self.interval,
            "behavior": self.behavior.value,
            "format": self.format.value,
            "url": self.url,
            "path": self.path,
        }
