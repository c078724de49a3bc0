"""Group data models — endpoints, region descriptors and policy groups."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

# Built-in targets understood by the engine without a group definition.
DIRECT = "DIRECT"
REJECT = "REJECT"
SENTINELS: frozenset[str] = frozenset({DIRECT, REJECT, "REJECT-DROP", "PASS", "COMPATIBLE"})


class GroupKind(enum.Enum):
    """Selection strategy of a policy group, as spelled in the engine config."""

    SELECT = "select"
    URL_TEST = "url-test"
    FALLBACK = "fallback"
    LOAD_BALANCE = "load-balance"


class LoadBalanceStrategy(enum.Enum):
    CONSISTENT_HASHING = "consistent-hashing"
    ROUND_ROBIN = "round-robin"


@dataclass(frozen=True)
class Endpoint:
    """An upstream proxy node. Only ``name`` takes part in grouping."""

    name: str
    type: str = ""
    server: str = ""
    port: int = 0
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_mapping(cls, record: object) -> Endpoint:
        """Build an endpoint from one entry of the document's ``proxies`` list."""
        if not isinstance(record, Mapping):
            raise ValueError(f"Endpoint record must be a mapping, got {type(record).__name__}")
        name = record.get("name")
        if not isinstance(name, str) or not name:
            raise ValueError(f"Endpoint record has no usable name: {record!r}")
        port = record.get("port", 0)
        return cls(
            name=name,
            type=str(record.get("type", "")),
            server=str(record.get("server", "")),
            port=port if isinstance(port, int) else 0,
            extra={k: v for k, v in record.items() if k not in ("name", "type", "server", "port")},
        )


@dataclass(frozen=True)
class RegionDescriptor:
    """Classifies endpoints into a region bucket by display-name pattern.

    A descriptor with ``pattern=None`` is the catch-all bucket.
    """

    code: str
    label: str
    icon: str = ""
    pattern: str | None = None

    @property
    def is_catch_all(self) -> bool:
        return self.pattern is None

    @property
    def auto_group(self) -> str:
        return f"{self.label} - 自动选择"

    @property
    def manual_group(self) -> str:
        return f"{self.label} - 手动选择"


@dataclass(frozen=True)
class PolicyGroup:
    """A named selection strategy over endpoints and/or other groups."""

    name: str
    kind: GroupKind
    members: tuple[str, ...] = ()
    hidden: bool = False
    icon: str = ""
    url: str = ""
    interval: int = 0
    tolerance: int = 0
    strategy: LoadBalanceStrategy | None = None
    exclude_filter: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Render the group the way the engine reads ``proxy-groups`` entries."""
        data: dict[str, Any] = {"name": self.name, "type": self.kind.value}
        if self.strategy is not None:
            data["strategy"] = self.strategy.value
        if self.url:
            data["url"] = self.url
        if self.interval:
            data["interval"] = self.interval
        if self.tolerance:
            data["tolerance"] = self.tolerance
        if self.icon:
            data["icon"] = self.icon
        if self.exclude_filter:
            data["exclude-filter"] = self.exclude_filter
        data["proxies"] = list(self.members)
        if self.hidden:
            data["hidden"] = True
        return data
