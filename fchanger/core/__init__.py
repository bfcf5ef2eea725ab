"""Core batch model for Fchanger."""

from fchanger.core.models import (
    ConversionOptions,
    ConvertedOutput,
    DownloadArtifact,
    MetadataRecord,
    SourceImage,
)
from fchanger.core.state import ConversionItem, ItemStatus

__all__ = [
    "ConversionItem",
    "ConversionOptions",
    "ConvertedOutput",
    "DownloadArtifact",
    "ItemStatus",
    "MetadataRecord",
    "SourceImage",
]
