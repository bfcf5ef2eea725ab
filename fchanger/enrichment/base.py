"""Contract between the batch orchestrator and a metadata provider."""

from typing import Protocol, runtime_checkable

from fchanger.core.models import MetadataRecord


@runtime_checkable
class MetadataEnricher(Protocol):
    """Suggests a filename, alt text and description for an image.

    Implementations may suspend for as long as their backend needs and must
    raise EnrichmentError for every failure, including malformed responses.
    They never see or mutate a ConversionItem.
    """

    async def analyze(self, data: bytes, content_type: str) -> MetadataRecord: ...
