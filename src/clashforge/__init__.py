"""clashforge — turn a base Mihomo/Clash profile into a complete runtime config."""

__version__ = "0.1.0"
