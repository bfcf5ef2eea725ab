"""Utility modules for Fchanger."""

from fchanger.utils.logging import get_logger, setup_logging

__all__ = [
    "get_logger",
    "setup_logging",
]
