"""LLM-powered suggestion of filename, alt text and description."""

import json
from typing import Any

import anyio
from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError

from fchanger.config.constants import DEFAULT_MAX_ALT_TEXT_LENGTH
from fchanger.core.models import MetadataRecord
from fchanger.exceptions import EnrichmentError, ImageProcessingError
from fchanger.image.compositor import composite
from fchanger.image.decoder import decode
from fchanger.image.encoder import encode
from fchanger.image.formats import SupportedFormat
from fchanger.llm.base import BaseVisionProvider, LLMResponse, ResponseFormat
from fchanger.utils.fs import slugify_filename
from fchanger.utils.logging import get_logger

log = get_logger(__name__)

# MIME types accepted by vision APIs without conversion
LLM_SUPPORTED_MIME_TYPES = {"image/png", "image/jpeg", "image/webp", "image/heic", "image/heif"}

METADATA_PROMPT = """Analyze this image.
1. Create a short, SEO-friendly, hyphenated filename (without extension).
2. Write a concise alt text (max 125 chars) for accessibility.
3. Write a brief description of the visual content.

Respond ONLY with a JSON object with the fields "suggestedFilename", "altText" and "description"."""

METADATA_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "suggestedFilename": {
            "type": "string",
            "description": "A clean, SEO-friendly filename using hyphens, e.g., 'sunset-ocean-view'",
        },
        "altText": {
            "type": "string",
            "description": "Accessibility text for the image",
        },
        "description": {
            "type": "string",
            "description": "A short description of the image content",
        },
    },
    "required": ["suggestedFilename", "altText", "description"],
}


class MetadataResponse(BaseModel):
    """Wire shape of the provider's JSON answer."""

    model_config = ConfigDict(populate_by_name=True)

    suggested_filename: StrictStr = Field(alias="suggestedFilename")
    alt_text: StrictStr = Field(alias="altText")
    description: StrictStr


def _strip_code_fence(content: str) -> str:
    """Extract the body of a ```json fenced block if the model wrapped its answer."""
    if not content.startswith("```"):
        return content

    json_lines = []
    in_block = False
    for line in content.split("\n"):
        if line.startswith("```"):
            in_block = not in_block
            continue
        if in_block:
            json_lines.append(line)
    return "\n".join(json_lines)


def _to_png(data: bytes) -> bytes:
    with decode(data) as bitmap, composite(bitmap, SupportedFormat.PNG) as surface:
        return encode(surface, SupportedFormat.PNG)


class ImageMetadataAnalyzer:
    """Asks a vision provider for a filename, alt text and description."""

    def __init__(
        self,
        provider: BaseVisionProvider,
        max_alt_text_length: int = DEFAULT_MAX_ALT_TEXT_LENGTH,
    ) -> None:
        """Initialize the analyzer.

        Args:
            provider: Vision provider to send images to
            max_alt_text_length: Intended alt text limit; longer text is kept but logged
        """
        self.provider = provider
        self.max_alt_text_length = max_alt_text_length

    async def _prepare_payload(self, data: bytes, content_type: str) -> tuple[bytes, str]:
        """Convert formats vision APIs reject (GIF, BMP, AVIF) to PNG."""
        if content_type.lower() in LLM_SUPPORTED_MIME_TYPES:
            return data, content_type.lower()

        log.info("Converting image to PNG for analysis", content_type=content_type)
        try:
            png = await anyio.to_thread.run_sync(_to_png, data)
        except ImageProcessingError as e:
            raise EnrichmentError(f"Cannot prepare image for analysis: {e}", cause=e) from e
        return png, "image/png"

    async def analyze(self, data: bytes, content_type: str) -> MetadataRecord:
        """Analyze an image.

        Raises:
            EnrichmentError: Provider failure, or a response missing a required field
        """
        payload, mime_type = await self._prepare_payload(data, content_type)

        try:
            response = await self.provider.analyze_image(
                image_data=payload,
                prompt=METADATA_PROMPT,
                mime_type=mime_type,
                response_format=ResponseFormat(type="json_schema", json_schema=METADATA_SCHEMA),
            )
        except Exception as e:
            raise EnrichmentError(f"{self.provider.name} request failed: {e}", cause=e) from e

        return self._parse_response(response)

    def _parse_response(self, response: LLMResponse) -> MetadataRecord:
        """Parse the LLM response into a MetadataRecord."""
        content = _strip_code_fence(response.content.strip())
        if not content:
            raise EnrichmentError("Empty response from provider")

        try:
            parsed = MetadataResponse.model_validate(json.loads(content))
        except json.JSONDecodeError as e:
            raise EnrichmentError(f"Response is not valid JSON: {e}", cause=e) from e
        except ValidationError as e:
            raise EnrichmentError(f"Response is missing required fields: {e}", cause=e) from e

        filename = slugify_filename(parsed.suggested_filename, fallback="")
        if not filename:
            raise EnrichmentError(
                f"Suggested filename {parsed.suggested_filename!r} has no usable characters"
            )

        if len(parsed.alt_text) > self.max_alt_text_length:
            log.debug(
                "Alt text longer than intended",
                length=len(parsed.alt_text),
                limit=self.max_alt_text_length,
            )

        return MetadataRecord(
            suggested_filename=filename,
            alt_text=parsed.alt_text.strip(),
            description=parsed.description.strip(),
        )
