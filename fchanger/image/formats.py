"""Registry of supported target formats.

Each format maps to the Pillow writer that produces it, the canonical file
extension and the MIME type the output is served with.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from PIL import Image

from fchanger.exceptions import UnsupportedFormatError


@dataclass(frozen=True)
class FormatSpec:
    """Static facts about one target format."""

    encoder_id: str
    extension: str
    mime_type: str
    supports_alpha: bool
    has_quality_axis: bool


class SupportedFormat(str, Enum):
    """Closed set of target formats."""

    PNG = "png"
    JPEG = "jpeg"
    WEBP = "webp"
    BMP = "bmp"
    AVIF = "avif"
    GIF = "gif"

    @property
    def spec(self) -> FormatSpec:
        return FORMAT_SPECS[self]

    @classmethod
    def parse(cls, value: str | SupportedFormat) -> SupportedFormat:
        """Parse a format name, extension or MIME type.

        Accepts e.g. ``"JPG"``, ``".jpeg"``, ``"image/webp"``. Anything outside the
        closed set raises UnsupportedFormatError.
        """
        if isinstance(value, cls):
            return value

        key = str(value).strip().lower()
        if key.startswith("image/"):
            key = key[len("image/") :]
        key = key.lstrip(".")
        key = _ALIASES.get(key, key)

        try:
            return cls(key)
        except ValueError:
            raise UnsupportedFormatError(str(value)) from None


FORMAT_SPECS: dict[SupportedFormat, FormatSpec] = {
    SupportedFormat.PNG: FormatSpec("PNG", "png", "image/png", True, False),
    SupportedFormat.JPEG: FormatSpec("JPEG", "jpg", "image/jpeg", False, True),
    SupportedFormat.WEBP: FormatSpec("WEBP", "webp", "image/webp", True, True),
    SupportedFormat.BMP: FormatSpec("BMP", "bmp", "image/bmp", False, False),
    SupportedFormat.AVIF: FormatSpec("AVIF", "avif", "image/avif", True, True),
    SupportedFormat.GIF: FormatSpec("GIF", "gif", "image/gif", False, False),
}

_ALIASES = {
    "jpg": "jpeg",
    "jpe": "jpeg",
    "pjpeg": "jpeg",
    "x-ms-bmp": "bmp",
}


def extension_for(fmt: SupportedFormat) -> str:
    """Canonical file extension, without the dot."""
    return FORMAT_SPECS[fmt].extension


def encoder_id_for(fmt: SupportedFormat) -> str:
    """Pillow format name used to write ``fmt``."""
    return FORMAT_SPECS[fmt].encoder_id


def mime_type_for(fmt: SupportedFormat) -> str:
    return FORMAT_SPECS[fmt].mime_type


def supports_alpha(fmt: SupportedFormat) -> bool:
    return FORMAT_SPECS[fmt].supports_alpha


def has_quality_axis(fmt: SupportedFormat) -> bool:
    return FORMAT_SPECS[fmt].has_quality_axis


def is_encoder_available(fmt: SupportedFormat) -> bool:
    """Check whether the installed Pillow can write ``fmt``.

    AVIF needs a Pillow build with libavif (11.2+); the rest are always present.
    """
    Image.init()
    return encoder_id_for(fmt) in Image.SAVE
