"""Configuration module for Fchanger."""

from fchanger.config.settings import (
    ConversionConfig,
    EnrichmentConfig,
    FchangerSettings,
    OutputConfig,
    get_settings,
    reload_settings,
)

__all__ = [
    "ConversionConfig",
    "EnrichmentConfig",
    "FchangerSettings",
    "OutputConfig",
    "get_settings",
    "reload_settings",
]
