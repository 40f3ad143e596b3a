"""Configuration for the channel lineup engine."""

from channel_lineup.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
