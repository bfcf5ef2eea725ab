"""Image decoding, compositing and encoding for Fchanger."""

from fchanger.image.compositor import Surface, composite
from fchanger.image.decoder import Bitmap, decode
from fchanger.image.encoder import encode, validate_quality
from fchanger.image.formats import (
    SupportedFormat,
    encoder_id_for,
    extension_for,
    is_encoder_available,
    mime_type_for,
    supports_alpha,
)

__all__ = [
    "Bitmap",
    "Surface",
    "SupportedFormat",
    "composite",
    "decode",
    "encode",
    "encoder_id_for",
    "extension_for",
    "is_encoder_available",
    "mime_type_for",
    "supports_alpha",
    "validate_quality",
]
