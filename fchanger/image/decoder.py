"""Decode raw image bytes into an in-memory bitmap."""

from __future__ import annotations

import io
from types import TracebackType

from PIL import Image, ImageOps, UnidentifiedImageError

from fchanger.exceptions import DecodeError
from fchanger.utils.logging import get_logger

log = get_logger(__name__)


class Bitmap:
    """Decoded, pixel-addressable image.

    Owns the underlying Pillow image. Use as a context manager, or call
    ``close()``, so the decoder's native buffers are released.
    """

    def __init__(self, image: Image.Image, source_format: str | None = None) -> None:
        self._image: Image.Image | None = image
        self.source_format = source_format

    @property
    def image(self) -> Image.Image:
        if self._image is None:
            raise ValueError("Bitmap has been released")
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

    @property
    def closed(self) -> bool:
        return self._image is None

    def close(self) -> None:
        if self._image is not None:
            self._image.close()
            self._image = None

    def __enter__(self) -> Bitmap:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        if self._image is None:
            return "Bitmap(released)"
        return f"Bitmap({self.width}x{self.height}, mode={self._image.mode}, source={self.source_format})"


def decode(data: bytes, content_type: str | None = None, name: str | None = None) -> Bitmap:
    """Decode raw bytes into a Bitmap.

    Args:
        data: Encoded image bytes
        content_type: Declared MIME type, advisory only
        name: Source name, used in error messages

    Returns:
        A fully loaded Bitmap the caller must close

    Raises:
        DecodeError: Empty input, unrecognized or corrupt data
    """
    if not data:
        raise DecodeError("zero-byte input", name=name)

    try:
        opened = Image.open(io.BytesIO(data))
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise DecodeError(str(e) or type(e).__name__, name=name, cause=e) from e

    detected = opened.format
    image: Image.Image = opened
    try:
        if getattr(opened, "n_frames", 1) > 1:
            opened.seek(0)  # Still-image semantics: first frame only

        # Force full decode so truncated data fails here, not in the compositor
        opened.load()

        transposed = ImageOps.exif_transpose(opened)
        if transposed is not None and transposed is not opened:
            image = transposed
            opened.close()
    except (Image.DecompressionBombError, OSError, SyntaxError, ValueError, EOFError) as e:
        opened.close()
        raise DecodeError(str(e) or type(e).__name__, name=name, cause=e) from e

    if content_type and detected and not content_type.lower().endswith(detected.lower()):
        log.debug(
            "Declared content type differs from detected format",
            name=name,
            content_type=content_type,
            detected=detected,
        )

    return Bitmap(image, source_format=detected)
