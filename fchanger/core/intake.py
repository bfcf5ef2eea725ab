"""Input boundary: filter non-images and clamp the batch size."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from fchanger.config.constants import MAX_BATCH_SIZE, NO_VALID_IMAGES_WARNING, TRUNCATION_WARNING
from fchanger.core.models import SourceImage
from fchanger.utils.logging import get_logger

log = get_logger(__name__)


@dataclass
class IntakeResult:
    """Outcome of accepting a set of inputs."""

    accepted: list[SourceImage] = field(default_factory=list)
    rejected: list[str] = field(default_factory=list)
    truncated: int = 0
    warnings: list[str] = field(default_factory=list)

    @property
    def was_truncated(self) -> bool:
        return self.truncated > 0


def accept_inputs(inputs: Iterable[SourceImage], max_items: int = MAX_BATCH_SIZE) -> IntakeResult:
    """Keep image inputs only, then the first ``max_items`` of them.

    Never raises for bad input; problems are reported through ``warnings``.
    """
    result = IntakeResult()
    images: list[SourceImage] = []

    for source in inputs:
        if source.is_image:
            images.append(source)
        else:
            result.rejected.append(source.name)
            log.info("Rejected non-image input", name=source.name, content_type=source.content_type)

    if result.rejected:
        result.warnings.append(f"Skipped non-image files: {', '.join(result.rejected)}")

    if not images:
        result.warnings.append(NO_VALID_IMAGES_WARNING)
        return result

    if len(images) > max_items:
        result.truncated = len(images) - max_items
        result.warnings.append(TRUNCATION_WARNING.format(limit=max_items))
        log.warning("Batch truncated", limit=max_items, dropped=result.truncated)
        images = images[:max_items]

    result.accepted = images
    return result


def load_sources(paths: Iterable[Path | str]) -> list[SourceImage]:
    """Read files into SourceImages, in the given order."""
    return [SourceImage.from_path(p) for p in paths]
