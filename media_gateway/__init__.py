"""Douyin media gateway: resolves share links and relays their media."""

__version__ = "1.0.0"
