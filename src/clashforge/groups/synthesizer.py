"""Policy-group synthesis — region buckets in, layered ``proxy-groups`` out.

Output order:
    1. primary selector and the four all-endpoint strategy groups
    2. service-category selectors
    3. ad-block and catch-all utility groups
    4. one hidden fallback group per non-empty region
    5. one manual selector per non-empty region
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from clashforge.groups.models import (
    DIRECT,
    REJECT,
    Endpoint,
    GroupKind,
    LoadBalanceStrategy,
    PolicyGroup,
)
from clashforge.groups.regions import RegionTable

logger = logging.getLogger(__name__)

_ICON_BASE = (
    "https://fastly.jsdelivr.net/gh/clash-verge-rev/clash-verge-rev.github.io"
    "@main/docs/assets/icons/"
)

PROXY_MODE = "代理模式"
BEST_LATENCY = "延迟优选"
FAILOVER = "故障转移"
HASH_BALANCE = "负载均衡 (散列)"
ROUND_ROBIN = "负载均衡 (轮询)"
AD_BLOCK = "广告拦截"
FINAL = "漏网之鱼"

# Names of the synthesized region selectors; endpoints matching this are
# never listed as members of the all-endpoint strategy groups.
REGION_SELECTOR_FILTER = "自动选择|手动选择"

REGION_CHECK_INTERVAL = 300
REGION_CHECK_TOLERANCE = 50

# (name, icon) of each service-category selector, in output order.
SERVICE_GROUPS: tuple[tuple[str, str], ...] = (
    ("电报消息", _ICON_BASE + "telegram.svg"),
    ("AI", _ICON_BASE + "chatgpt.svg"),
    ("流媒体", _ICON_BASE + "youtube.svg"),
    ("交易所", "https://fastly.jsdelivr.net/gh/vadimmalykhin/binance-icons@main/crypto/btc.svg"),
    ("Google服务", _ICON_BASE + "google.svg"),
    ("苹果服务", _ICON_BASE + "apple.svg"),
    ("微软服务", _ICON_BASE + "microsoft.svg"),
    ("GoogleFCM", _ICON_BASE + "google.svg"),
    ("抖音", _ICON_BASE + "tiktok.svg"),
)


def synthesize(
    endpoints: Sequence[Endpoint],
    regions: RegionTable,
    speed_test_url: str,
) -> tuple[PolicyGroup, ...]:
    """Build the complete policy-group list for ``endpoints``.

    Pure function of its arguments: the same input always yields the same
    groups in the same order.
    """
    names = [ep.name for ep in endpoints]
    buckets = regions.partition(names)
    available = [desc for desc in regions if desc.code in buckets]

    region_selectors: list[str] = []
    for desc in available:
        region_selectors.extend((desc.auto_group, desc.manual_group))

    exclude = re.compile(REGION_SELECTOR_FILTER)
    checkable = tuple(name for name in names if not exclude.search(name))

    groups: list[PolicyGroup] = [
        PolicyGroup(
            name=PROXY_MODE,
            kind=GroupKind.SELECT,
            url=speed_test_url,
            icon=_ICON_BASE + "adjust.svg",
            members=(BEST_LATENCY, FAILOVER, HASH_BALANCE, ROUND_ROBIN, *region_selectors),
        ),
        _all_endpoint_group(BEST_LATENCY, GroupKind.URL_TEST, "speed.svg", checkable),
        _all_endpoint_group(FAILOVER, GroupKind.FALLBACK, "ambulance.svg", checkable),
        _all_endpoint_group(
            HASH_BALANCE,
            GroupKind.LOAD_BALANCE,
            "balance.svg",
            checkable,
            strategy=LoadBalanceStrategy.CONSISTENT_HASHING,
        ),
        _all_endpoint_group(
            ROUND_ROBIN,
            GroupKind.LOAD_BALANCE,
            "merry_go.svg",
            checkable,
            strategy=LoadBalanceStrategy.ROUND_ROBIN,
        ),
    ]

    for name, icon in SERVICE_GROUPS:
        groups.append(
            PolicyGroup(
                name=name,
                kind=GroupKind.SELECT,
                members=(PROXY_MODE, DIRECT, *region_selectors),
                icon=icon,
            )
        )

    groups.append(
        PolicyGroup(
            name=AD_BLOCK,
            kind=GroupKind.SELECT,
            members=(REJECT, DIRECT, PROXY_MODE),
            icon=_ICON_BASE + "bug.svg",
        )
    )
    groups.append(
        PolicyGroup(
            name=FINAL,
            kind=GroupKind.SELECT,
            members=(PROXY_MODE, DIRECT),
            icon=_ICON_BASE + "fish.svg",
        )
    )

    for desc in available:
        groups.append(
            PolicyGroup(
                name=desc.auto_group,
                kind=GroupKind.FALLBACK,
                members=tuple(buckets[desc.code]),
                url=speed_test_url,
                interval=REGION_CHECK_INTERVAL,
                tolerance=REGION_CHECK_TOLERANCE,
                hidden=True,
            )
        )
    for desc in available:
        groups.append(
            PolicyGroup(
                name=desc.manual_group,
                kind=GroupKind.SELECT,
                members=tuple(buckets[desc.code]),
                icon=desc.icon,
            )
        )

    logger.info(
        "Synthesized %d group(s) for %d endpoint(s) across %d region(s)",
        len(groups),
        len(names),
        len(available),
    )
    return tuple(groups)


def _all_endpoint_group(
    name: str,
    kind: GroupKind,
    icon: str,
    members: tuple[str, ...],
    strategy: LoadBalanceStrategy | None = None,
) -> PolicyGroup:
    return PolicyGroup(
        name=name,
        kind=kind,
        members=members,
        icon=_ICON_BASE + icon,
        exclude_filter=REGION_SELECTOR_FILTER,
        strategy=strategy,
        hidden=True,
    )
