"""Global configuration — XDG paths, env vars, defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_SPEED_TEST_URL = "http://www.gstatic.com/generate_204"

_TRUTHY = {"1", "true", "yes", "on"}


def _parse_port(var: str, raw: str) -> int:
    try:
        port = int(raw)
    except ValueError:
        raise ValueError(f"{var} must be an integer port, got {raw!r}") from None
    if not 0 < port < 65536:
        raise ValueError(f"{var} must be between 1 and 65535, got {port}")
    return port


def _default_config_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "clashforge"
    return Path.home() / ".config" / "clashforge"


@dataclass
class ForgeConfig:
    """Application-wide configuration."""

    config_dir: Path = field(default_factory=_default_config_dir)
    speed_test_url: str = DEFAULT_SPEED_TEST_URL
    mixed_port: int = 7890
    dns_listen_port: int = 1053  # Shared by dns.listen and tun.dns-hijack
    extended_regions: bool = False
    custom_rules_path: Path | None = None
    regions_path: Path | None = None
    verbose: bool = False

    @classmethod
    def load(cls) -> ForgeConfig:
        """Load config from environment variables with XDG defaults."""
        config = cls()

        env_url = os.environ.get("CLASHFORGE_SPEED_TEST_URL")
        if env_url:
            config.speed_test_url = env_url

        env_port = os.environ.get("CLASHFORGE_MIXED_PORT")
        if env_port:
            config.mixed_port = _parse_port("CLASHFORGE_MIXED_PORT", env_port)

        env_dns = os.environ.get("CLASHFORGE_DNS_PORT")
        if env_dns:
            config.dns_listen_port = _parse_port("CLASHFORGE_DNS_PORT", env_dns)

        env_ext = os.environ.get("CLASHFORGE_EXTENDED_REGIONS")
        if env_ext:
            config.extended_regions = env_ext.strip().lower() in _TRUTHY

        # Pick up user tables from the config dir if they exist
        rules_file = config.config_dir / "custom_rules.yaml"
        if rules_file.is_file():
            config.custom_rules_path = rules_file

        regions_file = config.config_dir / "regions.yaml"
        if regions_file.is_file():
            config.regions_path = regions_file

        return config
