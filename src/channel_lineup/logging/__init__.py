"""Logging utilities."""

from channel_lineup.logging.config import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
