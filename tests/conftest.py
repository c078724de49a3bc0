"""Shared test fixtures."""

from __future__ import annotations

import copy
from pathlib import Path

import pytest

from clashforge.groups.models import Endpoint


@pytest.fixture
def fixtures_dir() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def base_profile_path(fixtures_dir: Path) -> Path:
    return fixtures_dir / "base_profile.yaml"


@pytest.fixture
def custom_rules_path(fixtures_dir: Path) -> Path:
    return fixtures_dir / "custom_rules.yaml"


@pytest.fixture
def regions_path(fixtures_dir: Path) -> Path:
    return fixtures_dir / "regions.yaml"


@pytest.fixture
def sample_endpoints() -> list[Endpoint]:
    return [
        Endpoint(name="HK-01", type="ss", server="hk.example.com", port=443),
        Endpoint(name="US-01", type="trojan", server="us.example.com", port=443),
        Endpoint(name="Random-X", type="vmess", server="x.example.com", port=8443),
    ]


@pytest.fixture
def sample_document() -> dict:
    return copy.deepcopy(
        {
            "port": 7891,
            "mode": "global",
            "log-level": "info",
            "proxies": [
                {"name": "HK-01", "type": "ss", "server": "hk.example.com", "port": 443},
                {"name": "US-01", "type": "trojan", "server": "us.example.com", "port": 443},
                {"name": "Random-X", "type": "vmess", "server": "x.example.com", "port": 8443},
            ],
        }
    )
