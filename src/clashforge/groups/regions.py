"""Region table — ordered, validated name patterns that bucket endpoints.

Patterns are case-insensitive regular expressions searched anywhere in the raw
display name. Descriptors are tried in table order and the first match wins;
the catch-all descriptor only receives names no patterned descriptor claimed.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence

from clashforge.groups.models import RegionDescriptor

logger = logging.getLogger(__name__)

_FLAG_ICON = (
    "https://fastly.jsdelivr.net/gh/clash-verge-rev/clash-verge-rev.github.io"
    "@main/docs/assets/icons/flags/{}.svg"
)
_LINK_ICON = (
    "https://raw.githubusercontent.com/clash-verge-rev/clash-verge-rev.github.io"
    "/refs/heads/main/docs/assets/icons/link.svg"
)


class RegionTableError(ValueError):
    """The static region table is malformed."""


class RegionTable:
    """An ordered set of region descriptors with pre-compiled patterns."""

    def __init__(self, descriptors: Iterable[RegionDescriptor]) -> None:
        self.descriptors: tuple[RegionDescriptor, ...] = tuple(descriptors)
        self._compiled: list[tuple[RegionDescriptor, re.Pattern[str]]] = []
        self._by_code: dict[str, RegionDescriptor] = {}

        labels: set[str] = set()
        catch_all: list[RegionDescriptor] = []
        for desc in self.descriptors:
            if desc.code in self._by_code:
                raise RegionTableError(f"Duplicate region code: {desc.code}")
            if desc.label in labels:
                raise RegionTableError(f"Duplicate region label: {desc.label}")
            self._by_code[desc.code] = desc
            labels.add(desc.label)

            if desc.is_catch_all:
                catch_all.append(desc)
                continue
            if not isinstance(desc.pattern, str):
                raise RegionTableError(
                    f"Region {desc.code} pattern must be a string, got {desc.pattern!r}"
                )
            try:
                regex = re.compile(desc.pattern, re.IGNORECASE)
            except re.error as exc:
                raise RegionTableError(
                    f"Region {desc.code} pattern does not compile: {exc}"
                ) from exc
            self._compiled.append((desc, regex))

        if len(catch_all) != 1:
            raise RegionTableError(
                f"Region table needs exactly one catch-all region, found {len(catch_all)}"
            )
        self.catch_all: RegionDescriptor = catch_all[0]

    def __len__(self) -> int:
        return len(self.descriptors)

    def __iter__(self):
        return iter(self.descriptors)

    def get(self, code: str) -> RegionDescriptor:
        return self._by_code[code]

    def classify(self, name: str) -> str:
        """Return the code of the region that claims ``name``."""
        for desc, regex in self._compiled:
            if regex.search(name):
                return desc.code
        return self.catch_all.code

    def partition(self, names: Sequence[str]) -> dict[str, list[str]]:
        """Bucket ``names`` by region code.

        Keys follow table order and only non-empty buckets are present; each
        bucket keeps the input order of its names.
        """
        buckets: dict[str, list[str]] = {desc.code: [] for desc in self.descriptors}
        for name in names:
            buckets[self.classify(name)].append(name)
        result = {code: members for code, members in buckets.items() if members}
        logger.debug(
            "Partitioned %d endpoint(s) into %d region(s): %s",
            len(names),
            len(result),
            ", ".join(f"{code}={len(m)}" for code, m in result.items()),
        )
        return result


def _flag(code: str, label: str, pattern: str, icon_code: str | None = None) -> RegionDescriptor:
    return RegionDescriptor(
        code=code,
        label=label,
        icon=_FLAG_ICON.format(icon_code or code.lower()),
        pattern=pattern,
    )


_PRIMARY: tuple[RegionDescriptor, ...] = (
    _flag("HK", "🇭🇰 香港", r"(香港|HK|Hong Kong|🇭🇰)"),
    _flag("TW", "🇹🇼 台湾", r"(台湾|TW|Taiwan|🇹🇼)"),
    _flag("SG", "🇸🇬 新加坡", r"(新加坡|狮城|SG|Singapore|🇸🇬)"),
    _flag("JP", "🇯🇵 日本", r"(日本|JP|Japan|🇯🇵)"),
    _flag("KR", "🇰🇷 韩国", r"(韩国|KR|Korea|South Korea|🇰🇷)"),
    _flag("US", "🇺🇸 美国", r"(美国|US|USA|United States|America|🇺🇸)"),
)

# Short two-letter codes such as IT or NO collide with ordinary words, so
# these stay opt-in.
_SECONDARY: tuple[RegionDescriptor, ...] = (
    _flag("DE", "🇩🇪 德国", r"(德国|DE|Germany|🇩🇪)"),
    _flag("UK", "🇬🇧 英国", r"(英国|UK|United Kingdom|Britain|Great Britain|🇬🇧)", "gb"),
    _flag("CA", "🇨🇦 加拿大", r"(加拿大|CA|Canada|🇨🇦)"),
    _flag("AU", "🇦🇺 澳大利亚", r"(澳大利亚|AU|Australia|🇦🇺)"),
    _flag("FR", "🇫🇷 法国", r"(法国|FR|France|🇫🇷)"),
    _flag("IT", "🇮🇹 意大利", r"(意大利|IT|Italy|🇮🇹)"),
    _flag("BR", "🇧🇷 巴西", r"(巴西|BR|Brazil|🇧🇷)"),
    _flag("RU", "🇷🇺 俄罗斯", r"(俄罗斯|RU|Russia|🇷🇺)"),
    _flag("IN", "🇮🇳 印度", r"\b(印度|IN|India|🇮🇳)\b"),
    _flag("CH", "🇨🇭 瑞士", r"(瑞士|CH|Switzerland|🇨🇭)"),
    _flag("SE", "🇸🇪 瑞典", r"(瑞典|SE|Sweden|🇸🇪)"),
    _flag("NO", "🇳🇴 挪威", r"(挪威|NO|Norway|🇳🇴)"),
    _flag("TR", "🇹🇷 土耳其", r"(土耳其|TR|Turkey|🇹🇷)"),
    _flag("AR", "🇦🇷 阿根廷", r"(阿根廷|AR|Argentina|🇦🇷)"),
    _flag("ES", "🇪🇸 西班牙", r"\b(西班牙|ES|Spain|🇪🇸)\b"),
    _flag("NL", "🇳🇱 荷兰", r"\b(荷兰|NL|Netherlands|🇳🇱)\b"),
)

OTHER = RegionDescriptor(code="OTHER", label="其他", icon=_LINK_ICON, pattern=None)

DEFAULT_REGIONS = RegionTable(_PRIMARY + (OTHER,))
EXTENDED_REGIONS = RegionTable(_PRIMARY + _SECONDARY + (OTHER,))
