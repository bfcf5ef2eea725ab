"""Draw a decoded bitmap onto a fresh surface sized to the source."""

from __future__ import annotations

from types import TracebackType

from PIL import Image

from fchanger.config.constants import OPAQUE_BACKGROUND
from fchanger.image.decoder import Bitmap
from fchanger.image.formats import SupportedFormat, supports_alpha

TRANSPARENT = (0, 0, 0, 0)


class Surface:
    """RGBA compositing target, always the exact size of its source bitmap."""

    def __init__(self, image: Image.Image) -> None:
        self._image: Image.Image | None = image

    @property
    def image(self) -> Image.Image:
        if self._image is None:
            raise ValueError("Surface has been released")
        return self._image

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size

    def close(self) -> None:
        if self._image is not None:
            self._image.close()
            self._image = None

    def __enter__(self) -> Surface:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def _narrow_to_l(image: Image.Image) -> Image.Image:
    """Scale 16-bit and float greyscale down to 8 bits.

    A plain ``convert("L")`` clips, so a dark 16-bit scan would come out white.
    Integer data is taken as 16-bit; float data in [0, 1] is stretched to 255.
    """
    if image.mode == "F":
        _, high = image.getextrema()
        factor = 255.0 if high <= 1.0 else 1.0
        return image.point(lambda v: v * factor).convert("L")

    wide = image if image.mode == "I" else image.convert("I")
    try:
        return wide.point(lambda v: v * (1 / 257)).convert("L")
    finally:
        if wide is not image:
            wide.close()


def _as_rgba(image: Image.Image) -> Image.Image:
    """Normalize any decoded mode to RGBA, turning palette transparency into alpha."""
    if image.mode == "RGBA":
        return image
    if image.mode == "P" and "transparency" in image.info:
        return image.convert("RGBA")
    if image.mode in ("I", "F") or image.mode.startswith("I;16"):
        narrowed = _narrow_to_l(image)
        try:
            return narrowed.convert("RGBA")
        finally:
            narrowed.close()
    if image.mode in ("CMYK", "YCbCr", "LAB", "HSV"):
        return image.convert("RGB").convert("RGBA")
    return image.convert("RGBA")


def composite(bitmap: Bitmap, target_format: SupportedFormat) -> Surface:
    """Composite ``bitmap`` onto a new surface for ``target_format``.

    Targets without alpha (JPEG, BMP, GIF) get an opaque white background
    before the bitmap is drawn source-over. Alpha-capable targets start from a
    fully transparent surface, so source alpha is preserved.
    """
    background = TRANSPARENT if supports_alpha(target_format) else OPAQUE_BACKGROUND
    surface = Image.new("RGBA", bitmap.size, background)

    source = _as_rgba(bitmap.image)
    try:
        surface.alpha_composite(source)
    finally:
        if source is not bitmap.image:
            source.close()

    return Surface(surface)
