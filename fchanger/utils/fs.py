"""File system utilities for Fchanger.

Filename sanitizing, conflict-free output paths and artifact persistence.
"""

import re
import unicodedata
from pathlib import Path
from typing import Literal

from fchanger.config.constants import DEFAULT_MAX_FILENAME_LENGTH
from fchanger.core.models import DownloadArtifact
from fchanger.utils.logging import get_logger

log = get_logger(__name__)

ConflictPolicy = Literal["skip", "overwrite", "rename"]

_SLUG_INVALID = re.compile(r"[^a-z0-9]+")


def ensure_directory(path: Path) -> Path:
    """Ensure a directory exists, creating it if necessary."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def safe_filename(filename: str, max_length: int = 255) -> str:
    """Create a safe filename by removing/replacing problematic characters.

    Args:
        filename: Original filename
        max_length: Maximum filename length

    Returns:
        Safe filename
    """
    replacements = {
        "/": "_",
        "\\": "_",
        ":": "_",
        "*": "_",
        "?": "_",
        '"': "_",
        "<": "_",
        ">": "_",
        "|": "_",
        "\0": "",
    }

    result = filename
    for old, new in replacements.items():
        result = result.replace(old, new)

    # Remove leading/trailing dots and spaces
    result = result.strip(". ")

    # Truncate if too long (preserve extension)
    if len(result) > max_length:
        stem = Path(result).stem
        suffix = Path(result).suffix
        result = stem[: max_length - len(suffix)] + suffix

    return result


def slugify_filename(
    value: str, fallback: str = "image", max_length: int = DEFAULT_MAX_FILENAME_LENGTH
) -> str:
    """Turn a model-suggested name into a lowercase hyphenated stem.

    ``"Sunset over the Ocean.png"`` becomes ``"sunset-over-the-ocean"``. Never
    returns an empty string.
    """
    stem = value.strip()
    lowered = stem.lower()
    for ext in (".png", ".jpg", ".jpeg", ".webp", ".bmp", ".avif", ".gif"):
        if lowered.endswith(ext):
            stem = stem[: -len(ext)]
            break

    ascii_only = unicodedata.normalize("NFKD", stem).encode("ascii", "ignore").decode("ascii")
    slug = _SLUG_INVALID.sub("-", ascii_only.lower()).strip("-")

    if len(slug) > max_length:
        slug = slug[:max_length].rstrip("-")

    return slug or fallback


def get_unique_path(path: Path) -> Path:
    """Get a unique path by adding a counter suffix if path exists."""
    if not path.exists():
        return path

    stem = path.stem
    suffix = path.suffix
    parent = path.parent

    counter = 1
    while True:
        new_path = parent / f"{stem}_{counter}{suffix}"
        if not new_path.exists():
            return new_path
        counter += 1


def save_artifact(
    artifact: DownloadArtifact,
    directory: Path,
    on_conflict: ConflictPolicy = "rename",
) -> Path | None:
    """Write a converted image into ``directory``.

    Returns:
        Path written, or None when skipped because the file already exists
    """
    ensure_directory(directory)
    target = directory / safe_filename(artifact.filename)

    if target.exists():
        if on_conflict == "skip":
            log.info("Output exists, skipping", path=str(target))
            return None
        if on_conflict == "rename":
            target = get_unique_path(target)

    target.write_bytes(artifact.data)
    log.debug("Wrote output", path=str(target), bytes=len(artifact.data))
    return target
