"""Serialize a composited surface into bytes of the target format."""

from __future__ import annotations

import io
import math
from typing import Any

from PIL import Image

from fchanger.exceptions import EncodeError, InvalidQualityError
from fchanger.image.compositor import Surface
from fchanger.image.formats import (
    SupportedFormat,
    encoder_id_for,
    has_quality_axis,
    is_encoder_available,
)
from fchanger.utils.logging import get_logger

log = get_logger(__name__)


def validate_quality(quality: Any) -> float:
    """Return ``quality`` as a float in [0, 1] or raise InvalidQualityError."""
    if isinstance(quality, bool) or not isinstance(quality, (int, float)):
        raise InvalidQualityError(quality)
    if math.isnan(quality) or not 0.0 <= quality <= 1.0:
        raise InvalidQualityError(quality)
    return float(quality)


def _prepare(image: Image.Image, fmt: SupportedFormat) -> Image.Image:
    """Convert the RGBA surface into the pixel mode the writer expects."""
    if fmt in (SupportedFormat.JPEG, SupportedFormat.BMP):
        return image.convert("RGB")
    if fmt is SupportedFormat.GIF:
        return image.convert("RGB").quantize(colors=256, method=Image.Quantize.MEDIANCUT)
    return image


def _save_params(fmt: SupportedFormat, quality: float) -> dict[str, Any]:
    if not has_quality_axis(fmt):
        return {}

    level = round(quality * 100)
    if fmt is SupportedFormat.JPEG:
        return {"quality": level, "optimize": True}
    if fmt is SupportedFormat.WEBP:
        return {"quality": level, "method": 4}
    return {"quality": level}


def encode(surface: Surface, fmt: SupportedFormat, quality: float = 1.0) -> bytes:
    """Encode ``surface`` as ``fmt``.

    Args:
        surface: Composited RGBA surface
        fmt: Target format
        quality: Lossy quality in [0, 1]; ignored for PNG, BMP and GIF

    Returns:
        Encoded file content

    Raises:
        InvalidQualityError: quality outside [0, 1]
        EncodeError: No writer for ``fmt`` or the writer failed
    """
    quality = validate_quality(quality)

    if not is_encoder_available(fmt):
        raise EncodeError(fmt.value, "no encoder available in this Pillow build")

    prepared = _prepare(surface.image, fmt)
    buffer = io.BytesIO()
    try:
        prepared.save(buffer, format=encoder_id_for(fmt), **_save_params(fmt, quality))
    except (OSError, ValueError, KeyError) as e:
        log.warning("Encoder failed", target=fmt.value, size=surface.size, error=str(e))
        raise EncodeError(fmt.value, str(e) or type(e).__name__, cause=e) from e
    finally:
        if prepared is not surface.image:
            prepared.close()

    data = buffer.getvalue()
    if not data:
        raise EncodeError(fmt.value, "encoder produced no output")

    return data
