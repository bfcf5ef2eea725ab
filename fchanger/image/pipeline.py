"""Single-image conversion: decode, composite, encode."""

from __future__ import annotations

import anyio

from fchanger.core.models import ConversionOptions, ConvertedOutput, SourceImage
from fchanger.image.compositor import composite
from fchanger.image.decoder import decode
from fchanger.image.encoder import encode
from fchanger.utils.logging import get_logger

log = get_logger(__name__)


def convert_image(source: SourceImage, options: ConversionOptions) -> ConvertedOutput:
    """Convert one source image. The three stages run strictly in order.

    Raises:
        DecodeError: Source bytes are not a decodable image
        InvalidQualityError: options.quality outside [0, 1]
        EncodeError: The target encoder failed
    """
    with decode(source.data, source.content_type, name=source.name) as bitmap:
        width, height = bitmap.size
        with composite(bitmap, options.format) as surface:
            data = encode(surface, options.format, options.quality)

    log.debug(
        "Image converted",
        name=source.name,
        target=options.format.value,
        width=width,
        height=height,
        input_bytes=source.size,
        output_bytes=len(data),
    )

    return ConvertedOutput(data=data, format=options.format, width=width, height=height)


async def convert_image_async(source: SourceImage, options: ConversionOptions) -> ConvertedOutput:
    """Run ``convert_image`` in a worker thread so the event loop stays free."""
    return await anyio.to_thread.run_sync(convert_image, source, options)
