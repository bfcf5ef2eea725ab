"""Metadata enrichment: suggested filenames, alt text and descriptions."""

from fchanger.enrichment.analyzer import ImageMetadataAnalyzer
from fchanger.enrichment.base import MetadataEnricher

__all__ = [
    "ImageMetadataAnalyzer",
    "MetadataEnricher",
]
