"""Fixed configuration fragments merged into the document.

Each fragment is an immutable dataclass rendered with ``to_dict()`` into a
fresh mapping, so no list is shared between invocations. ``apply_overlay``
is last-write-wins: keys already present in the document are replaced.
"""

from __future__ import annotations

from collections.abc import MutableMapping
from dataclasses import dataclass
from typing import Any

TELEGRAM_ADDRESSES: tuple[str, ...] = (
    "91.105.192.0/23",
    "91.108.4.0/22",
    "91.108.8.0/21",
    "91.108.16.0/21",
    "91.108.56.0/22",
    "95.161.64.0/20",
    "149.154.160.0/20",
    "185.76.151.0/24",
    "2001:67c:4e8::/48",
    "2001:b28:f23c::/47",
    "2001:b28:f23f::/48",
    "2a0a:f280:203::/48",
)

FAKE_IP_FILTER: tuple[str, ...] = (
    "+.lan",
    "+.local",
    "+.msftconnecttest.com",
    "+.msftncsi.com",
    "localhost.ptlogin2.qq.com",
    "localhost.sec.qq.com",
    "+.in-addr.arpa",
    "+.ip6.arpa",
    "time.*.com",
    "time.*.gov",
    "pool.ntp.org",
    "localhost.work.weixin.qq.com",
)

DOMESTIC_NAMESERVERS: tuple[str, ...] = (
    "https://223.5.5.5/dns-query",
    "https://doh.pub/dns-query",
)
FOREIGN_NAMESERVERS: tuple[str, ...] = ("https://dns.google/dns-query",)


@dataclass(frozen=True)
class BasicOptions:
    """Top-level engine options; merged key by key into the document root."""

    mixed_port: int = 7890
    allow_lan: bool = True
    unified_delay: bool = True
    tcp_concurrent: bool = True
    geodata_mode: bool = True
    mode: str = "rule"
    ipv6: bool = False
    store_selected: bool = True
    store_fake_ip: bool = True
    client_fingerprint: str = "chrome"
    fakeip_process_mode: str = "strict"
    lan_allowed_ips: tuple[str, ...] = ("0.0.0.0/0", "::/0")
    skip_auth_prefixes: tuple[str, ...] = ("127.0.0.1/32",)

    def to_dict(self) -> dict[str, Any]:
        return {
            "mixed-port": self.mixed_port,
            "allow-lan": self.allow_lan,
            "unified-delay": self.unified_delay,
            "tcp-concurrent": self.tcp_concurrent,
            "geodata-mode": self.geodata_mode,
            "mode": self.mode,
            "ipv6": self.ipv6,
            "profile": {
                "store-selected": self.store_selected,
                "store-fake-ip": self.store_fake_ip,
            },
            "global-client-fingerprint": self.client_fingerprint,
            "fakeip-process-mode": self.fakeip_process_mode,
            "lan-allowed-ips": list(self.lan_allowed_ips),
            "skip-auth-prefixes": list(self.skip_auth_prefixes),
        }


@dataclass(frozen=True)
class SnifferSettings:
    """Domain sniffing so that domain rules apply to raw-IP connections."""

    http_ports: tuple[str, ...] = ("80", "443")
    tls_ports: tuple[str, ...] = ("443",)
    skip_domains: tuple[str, ...] = ("+.push.apple.com",)
    skip_dst_addresses: tuple[str, ...] = TELEGRAM_ADDRESSES

    def to_dict(self) -> dict[str, Any]:
        return {
            "enable": True,
            "force-dns-mapping": True,
            "parse-pure-ip": True,
            "override-destination": False,
            "sniff": {
                "HTTP": {"ports": list(self.http_ports), "override-destination": False},
                "TLS": {"ports": list(self.tls_ports)},
            },
            "skip-domain": list(self.skip_domains),
            "skip-dst-address": list(self.skip_dst_addresses),
        }


@dataclass(frozen=True)
class DnsSettings:
    """Fake-IP resolution with split domestic/foreign upstreams."""

    listen_port: int = 1053
    fake_ip_range: str = "198.18.0.1/16"
    fake_ip_filter: tuple[str, ...] = FAKE_IP_FILTER
    default_nameservers: tuple[str, ...] = ("1.1.1.1", "8.8.8.8")
    domestic: tuple[str, ...] = DOMESTIC_NAMESERVERS
    foreign: tuple[str, ...] = FOREIGN_NAMESERVERS

    @property
    def listen(self) -> str:
        return f"0.0.0.0:{self.listen_port}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "enable": True,
            "listen": self.listen,
            "ipv6": False,
            "prefer-h3": False,
            "respect-rules": True,
            "use-system-hosts": False,
            "cache-algorithm": "arc",
            "enhanced-mode": "fake-ip",
            "fake-ip-range": self.fake_ip_range,
            "fake-ip-filter": list(self.fake_ip_filter),
            "default-nameserver": list(self.default_nameservers),
            "nameserver": list(self.foreign),
            # Proxy server hostnames try domestic resolvers first.
            "proxy-server-nameserver": [*self.domestic, *self.foreign],
            "nameserver-policy": {"geosite:private,cn": list(self.domestic)},
        }


@dataclass(frozen=True)
class TunSettings:
    """Virtual interface capture. ``dns_port`` must equal the DNS listen port."""

    dns_port: int = 1053
    stack: str = "mixed"
    device: str = "Mihomo"
    strict_route: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "enable": True,
            "stack": self.stack,
            "device": self.device,
            "dns-hijack": [f"0.0.0.0:{self.dns_port}", f"::/0:{self.dns_port}"],
            "auto-route": True,
            "auto-detect-interface": True,
            "strict-route": self.strict_route,
        }


def apply_overlay(
    document: MutableMapping[str, Any],
    fragment: dict[str, Any],
    key: str | None = None,
) -> None:
    """Write ``fragment`` into ``document``.

    With ``key`` the whole section is replaced; without it each fragment key
    replaces the root key of the same name.
    """
    if key is None:
        document.update(fragment)
    else:
        document[key] = fragment
