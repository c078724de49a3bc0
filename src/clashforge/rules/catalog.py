"""Static rule-source registry and the fixed rule tiers.

Everything here is built once at import time; a malformed table raises
``RuleCatalogError`` and stops the process before any document is touched.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from types import MappingProxyType

from clashforge.groups.models import DIRECT
from clashforge.groups.synthesizer import AD_BLOCK, FINAL, PROXY_MODE
from clashforge.rules.models import (
    MATCH,
    Behavior,
    RuleEntry,
    RuleSource,
    SourceFormat,
    Tier,
)

AD_BLOCK_INTERVAL = 86400

_REALSEEK_URL = "https://raw.githubusercontent.com/RealSeek/Clash_Rule_DIY/refs/heads/mihomo/"
_REALSEEK_PATH = "./ruleset/RealSeek/Clash_Rule_DIY/"

# Tiers filled from the catalog, in precedence order. CUSTOM sits between
# BLOCK and PROXY_DOMAIN and is supplied by the caller.
FIXED_TIERS: tuple[Tier, ...] = (Tier.BLOCK, Tier.PROXY_DOMAIN, Tier.DIRECT_DOMAIN, Tier.IP_GEO)


class RuleCatalogError(ValueError):
    """The static rule catalog is malformed."""


class RuleCatalog:
    """Declared rule sources plus the pre-parsed fixed tiers."""

    def __init__(
        self,
        sources: Iterable[RuleSource],
        tiers: Mapping[Tier, Sequence[str]],
        final_target: str = FINAL,
    ) -> None:
        registry: dict[str, RuleSource] = {}
        for source in sources:
            if source.name in registry:
                raise RuleCatalogError(f"Duplicate rule source: {source.name}")
            registry[source.name] = source
        self.sources: Mapping[str, RuleSource] = MappingProxyType(registry)

        if Tier.CUSTOM in tiers:
            raise RuleCatalogError("The custom tier cannot be part of the static catalog")

        parsed: dict[Tier, tuple[RuleEntry, ...]] = {}
        for tier in FIXED_TIERS:
            entries = tuple(RuleEntry.parse(line) for line in tiers.get(tier, ()))
            for entry in entries:
                if entry.is_terminal:
                    raise RuleCatalogError(
                        f"Tier {tier.value} contains a terminal rule: {entry.render()}"
                    )
                if entry.source is not None and entry.source not in registry:
                    raise RuleCatalogError(
                        f"Tier {tier.value} references undeclared rule source {entry.source!r}"
                    )
            parsed[tier] = entries
        self.tiers: Mapping[Tier, tuple[RuleEntry, ...]] = MappingProxyType(parsed)
        self.terminal = RuleEntry(matcher=MATCH, value="", target=final_target)

    def targets(self) -> set[str]:
        """Every target named by the fixed tiers and the terminal rule."""
        names = {entry.target for entries in self.tiers.values() for entry in entries}
        names.add(self.terminal.target)
        return names

    def referenced_sources(self) -> set[str]:
        return {
            entry.source
            for entries in self.tiers.values()
            for entry in entries
            if entry.source is not None
        }


def _ad_block(name: str, url: str, path: str, behavior: Behavior, fmt: SourceFormat) -> RuleSource:
    return RuleSource(
        name=name,
        url=url,
        path=path,
        behavior=behavior,
        format=fmt,
        interval=AD_BLOCK_INTERVAL,
    )


def _realseek(name: str, rel: str, behavior: Behavior = Behavior.CLASSICAL) -> RuleSource:
    return RuleSource(
        name=name,
        url=_REALSEEK_URL + rel,
        path=_REALSEEK_PATH + rel,
        behavior=behavior,
    )


_BLACKMATRIX7 = "https://raw.githubusercontent.com/blackmatrix7/ios_rule_script/master/rule/Clash/"

SOURCES: tuple[RuleSource, ...] = (
    # Ad and tracker blocking
    _ad_block(
        "Advertising",
        _BLACKMATRIX7 + "Advertising/Advertising.yaml",
        "./ruleset/blackmatrix7/Advertising.yaml",
        Behavior.CLASSICAL,
        SourceFormat.YAML,
    ),
    _ad_block(
        "Privacy",
        _BLACKMATRIX7 + "Privacy/Privacy.yaml",
        "./ruleset/blackmatrix7/Privacy.yaml",
        Behavior.CLASSICAL,
        SourceFormat.YAML,
    ),
    _ad_block(
        "AdBlock_REIJI007",
        "https://raw.githubusercontent.com/REIJI007/AdBlock_Rule_For_Sing-box/main/adblock_reject_domain.txt",
        "./ruleset/REIJI007/adblock_reject_domain.yaml",
        Behavior.DOMAIN,
        SourceFormat.TEXT,
    ),
    _realseek("Reject_ip", "REJECT/ip/Reject_ip.yaml", Behavior.IPCIDR),
    _realseek("Reject_no_ip", "REJECT/no_ip/Reject_no_ip.yaml"),
    # Direct
    _realseek("China_ip", "DIRECT/ip/China_ip.yaml", Behavior.IPCIDR),
    _realseek("Domestic_ip", "DIRECT/ip/Domestic_ip.yaml"),
    _realseek("GoogleFCM_ip", "DIRECT/ip/GoogleFCM_ip.yaml"),
    _realseek("Lan_ip", "DIRECT/ip/Lan_ip.yaml"),
    _realseek("NetEaseMusic_ip", "DIRECT/ip/NetEaseMusic_ip.yaml"),
    _realseek("SteamCN_ip", "DIRECT/ip/SteamCN_ip.yaml"),
    _realseek("AppleCDN_no_ip", "DIRECT/no_ip/AppleCDN_no_ip.yaml", Behavior.DOMAIN),
    _realseek("AppleCN_no_ip", "DIRECT/no_ip/AppleCN_no_ip.yaml", Behavior.DOMAIN),
    _realseek("Direct_no_ip", "DIRECT/no_ip/Direct_no_ip.yaml"),
    _realseek("Domestic_no_ip", "DIRECT/no_ip/Domestic_no_ip.yaml"),
    _realseek("GoogleFCM_no_ip", "DIRECT/no_ip/GoogleFCM_no_ip.yaml"),
    _realseek("Lan_no_ip", "DIRECT/no_ip/Lan_no_ip.yaml"),
    _realseek("MicrosoftCDN_no_ip", "DIRECT/no_ip/MicrosoftCDN_no_ip.yaml"),
    _realseek("NetEaseMusic_no_ip", "DIRECT/no_ip/NetEaseMusic_no_ip.yaml"),
    _realseek("SteamCN_no_ip", "DIRECT/no_ip/SteamCN_no_ip.yaml"),
    # Proxy
    _realseek("SteamRegion_no_ip", "DIRECT/no_ip/SteamRegion_no_ip.yaml"),
    _realseek("Stream_ip", "PROXY/ip/Stream_ip.yaml"),
    _realseek("Telegram_ip", "PROXY/ip/Telegram_ip.yaml"),
    _realseek("AI_no_ip", "PROXY/no_ip/AI_no_ip.yaml"),
    _realseek("Apple_no_ip", "PROXY/no_ip/Apple_no_ip.yaml"),
    _realseek("CDN_domainset", "PROXY/no_ip/CDN_domainset.yaml", Behavior.DOMAIN),
    _realseek("CDN_no_ip", "PROXY/no_ip/CDN_no_ip.yaml"),
    _realseek("CustomProxy_no_ip", "PROXY/no_ip/CustomProxy_no_ip.yaml"),
    _realseek("Download_domainset", "PROXY/no_ip/Download_domainset.yaml", Behavior.DOMAIN),
    _realseek("Download_no_ip", "PROXY/no_ip/Download_no_ip.yaml"),
    _realseek("Global_no_ip", "PROXY/no_ip/Global_no_ip.yaml"),
    _realseek("Microsoft_no_ip", "PROXY/no_ip/Microsoft_no_ip.yaml"),
    _realseek("Steam_no_ip", "PROXY/no_ip/Steam_no_ip.yaml"),
    _realseek("Stream_no_ip", "PROXY/no_ip/Stream_no_ip.yaml"),
    _realseek("Telegram_no_ip", "PROXY/no_ip/Telegram_no_ip.yaml"),
    RuleSource(
        name="ExchangeApps_no_ip",
        url="https://raw.githubusercontent.com/gxjxzgx/clash_DIY/refs/heads/main/PROXY/ExchangeApps",
        path="./ruleset/gxjxzgx/ExchangeApps_no_ip.yaml",
    ),
    RuleSource(
        name="Google_no_ip",
        url="https://raw.githubusercontent.com/gxjxzgx/clash_DIY/main/PROXY/google.yaml",
        path="./ruleset/gxjxzgx/google.yaml",
    ),
)

TIERS: dict[Tier, tuple[str, ...]] = {
    Tier.BLOCK: (
        f"RULE-SET,Advertising,{AD_BLOCK}",
        f"RULE-SET,Privacy,{AD_BLOCK}",
        f"RULE-SET,AdBlock_REIJI007,{AD_BLOCK}",
        "RULE-SET,ExchangeApps_no_ip,交易所",
        f"RULE-SET,Reject_no_ip,{AD_BLOCK}",
    ),
    Tier.PROXY_DOMAIN: (
        "RULE-SET,AI_no_ip,AI",
        "PROCESS-NAME,com.ss.android.ugc.aweme,抖音",
        "RULE-SET,Stream_no_ip,流媒体",
        "RULE-SET,Google_no_ip,Google服务",
        "RULE-SET,Telegram_no_ip,电报消息",
        "RULE-SET,Apple_no_ip,苹果服务",
        "RULE-SET,Microsoft_no_ip,微软服务",
        f"RULE-SET,Steam_no_ip,{PROXY_MODE}",
        f"RULE-SET,SteamRegion_no_ip,{PROXY_MODE}",
        f"RULE-SET,CDN_domainset,{PROXY_MODE}",
        f"RULE-SET,CDN_no_ip,{PROXY_MODE}",
        f"RULE-SET,Download_domainset,{PROXY_MODE}",
        f"RULE-SET,Download_no_ip,{PROXY_MODE}",
        f"RULE-SET,Global_no_ip,{PROXY_MODE}",
        f"RULE-SET,CustomProxy_no_ip,{PROXY_MODE}",
    ),
    Tier.DIRECT_DOMAIN: (
        "RULE-SET,GoogleFCM_no_ip,GoogleFCM",
        f"RULE-SET,NetEaseMusic_no_ip,{DIRECT}",
        f"RULE-SET,SteamCN_no_ip,{DIRECT}",
        f"RULE-SET,AppleCDN_no_ip,{DIRECT}",
        f"RULE-SET,AppleCN_no_ip,{DIRECT}",
        f"RULE-SET,MicrosoftCDN_no_ip,{DIRECT}",
        f"RULE-SET,Domestic_no_ip,{DIRECT}",
        f"RULE-SET,Direct_no_ip,{DIRECT}",
        f"RULE-SET,Lan_no_ip,{DIRECT}",
    ),
    Tier.IP_GEO: (
        f"RULE-SET,Reject_ip,{AD_BLOCK}",
        "RULE-SET,Stream_ip,流媒体",
        "RULE-SET,GoogleFCM_ip,GoogleFCM",
        "RULE-SET,Telegram_ip,电报消息",
        f"RULE-SET,NetEaseMusic_ip,{DIRECT}",
        f"RULE-SET,SteamCN_ip,{DIRECT}",
        f"RULE-SET,Domestic_ip,{DIRECT}",
        f"RULE-SET,Lan_ip,{DIRECT}",
        f"GEOIP,CN,{DIRECT}",
        f"GEOSITE,cn,{DIRECT}",
        f"RULE-SET,China_ip,{DIRECT}",
    ),
}

DEFAULT_CUSTOM_RULES: tuple[str, ...] = (
    f"DOMAIN-KEYWORD,upai,{PROXY_MODE}",
    f"DOMAIN-SUFFIX,ipinfo.io,{PROXY_MODE}",
    f"DOMAIN-SUFFIX,ipdata.co,{PROXY_MODE}",
    f"PROCESS-NAME,org.zwanoo.android.speedtest,{PROXY_MODE}",
    f"DOMAIN-SUFFIX,jianguoyun.com,{DIRECT}",
)

DEFAULT_CATALOG = RuleCatalog(SOURCES, TIERS)
