"""Load and dump profiles, custom rule lists and region tables as YAML."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from clashforge.groups.models import RegionDescriptor
from clashforge.groups.regions import RegionTable


def load_document(path: str | Path) -> dict[str, Any]:
    """Load a base profile from a YAML file path."""
    text = Path(path).read_text(encoding="utf-8")
    return load_document_from_string(text)


def load_document_from_string(text: str) -> dict[str, Any]:
    data = _parse_yaml(text, "Profile")
    if not isinstance(data, dict):
        raise ValueError("Profile YAML must be a mapping")
    return data


def dump_document(document: dict[str, Any]) -> str:
    result: str = yaml.safe_dump(
        document,
        allow_unicode=True,
        sort_keys=False,
        default_flow_style=False,
    )
    return result


def load_custom_rules(path: str | Path) -> list[str]:
    """Load custom rule lines.

    Accepts either a bare YAML list of strings or a mapping with a ``rules``
    list. Order is preserved.
    """
    data = _parse_yaml(Path(path).read_text(encoding="utf-8"), "Custom rules")
    if data is None:
        return []
    if isinstance(data, dict):
        data = data.get("rules", [])
    if not isinstance(data, list):
        raise ValueError("Custom rules YAML must be a list or a mapping with 'rules'")

    rules: list[str] = []
    for item in data:
        if not isinstance(item, str):
            raise ValueError(f"Custom rule must be a string, got {item!r}")
        rules.append(item)
    return rules


def load_region_table(path: str | Path) -> RegionTable:
    """Load a region table; an entry without ``pattern`` is the catch-all."""
    data = _parse_yaml(Path(path).read_text(encoding="utf-8"), "Region")
    if isinstance(data, dict):
        data = data.get("regions", [])
    if not isinstance(data, list):
        raise ValueError("Region YAML must be a list or a mapping with 'regions'")

    descriptors: list[RegionDescriptor] = []
    for r in data:
        if not isinstance(r, dict):
            raise ValueError(f"Region entry must be a mapping, got {r!r}")
        code = r.get("code")
        if code is None or code == "":
            raise ValueError(f"Region entry has no code: {r!r}")
        pattern = r.get("pattern")
        if pattern is not None and not isinstance(pattern, str):
            raise ValueError(f"Region {code} pattern must be a string, got {pattern!r}")
        descriptors.append(
            RegionDescriptor(
                code=str(code),
                label=str(r.get("label", code)),
                icon=str(r.get("icon", "")),
                pattern=pattern,
            )
        )
    return RegionTable(descriptors)


def _parse_yaml(text: str, what: str) -> Any:
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ValueError(f"{what} YAML is malformed: {exc}") from exc
