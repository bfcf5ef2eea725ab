"""Tests for the image metadata analyzer."""

import io
import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from conftest import image_bytes
from PIL import Image

from fchanger.core.models import MetadataRecord
from fchanger.enrichment import ImageMetadataAnalyzer, MetadataEnricher
from fchanger.exceptions import EnrichmentError, LLMError
from fchanger.llm.base import BaseVisionProvider, LLMResponse


def _response(content: str) -> LLMResponse:
    return LLMResponse(content=content, usage=None, model="test-model", finish_reason="stop")


def _payload(**overrides) -> str:
    body = {
        "suggestedFilename": "sunset-ocean",
        "altText": "Sun setting over the ocean",
        "description": "An orange sunset over calm water.",
    }
    body.update(overrides)
    return json.dumps(body)


@pytest.fixture
def provider():
    mock = MagicMock(spec=BaseVisionProvider)
    mock.name = "mock"
    mock.analyze_image = AsyncMock(return_value=_response(_payload()))
    return mock


@pytest.fixture
def analyzer(provider):
    return ImageMetadataAnalyzer(provider)


class TestImageMetadataAnalyzer:
    """Tests for ImageMetadataAnalyzer.analyze()."""

    def test_satisfies_protocol(self, analyzer):
        assert isinstance(analyzer, MetadataEnricher)

    @pytest.mark.asyncio
    async def test_success(self, analyzer, provider):
        record = await analyzer.analyze(b"jpegdata", "image/jpeg")

        assert record == MetadataRecord(
            suggested_filename="sunset-ocean",
            alt_text="Sun setting over the ocean",
            description="An orange sunset over calm water.",
        )
        kwargs = provider.analyze_image.call_args.kwargs
        assert kwargs["image_data"] == b"jpegdata"
        assert kwargs["mime_type"] == "image/jpeg"
        assert kwargs["response_format"].type == "json_schema"
        assert kwargs["response_format"].json_schema["required"] == [
            "suggestedFilename",
            "altText",
            "description",
        ]

    @pytest.mark.asyncio
    async def test_code_fenced_response(self, analyzer, provider):
        provider.analyze_image.return_value = _response(f"```json\n{_payload()}\n```")

        record = await analyzer.analyze(b"x", "image/png")

        assert record.suggested_filename == "sunset-ocean"

    @pytest.mark.asyncio
    async def test_filename_is_slugified(self, analyzer, provider):
        provider.analyze_image.return_value = _response(
            _payload(suggestedFilename="Sunset Over the Ocean!.jpg")
        )

        record = await analyzer.analyze(b"x", "image/png")

        assert record.suggested_filename == "sunset-over-the-ocean"

    @pytest.mark.asyncio
    async def test_long_alt_text_kept(self, analyzer, provider):
        long_alt = "word " * 60
        provider.analyze_image.return_value = _response(_payload(altText=long_alt))

        record = await analyzer.analyze(b"x", "image/png")

        assert record.alt_text == long_alt.strip()

    @pytest.mark.asyncio
    async def test_unsupported_mime_is_sent_as_png(self, analyzer, provider):
        """BMP is transcoded to PNG before upload."""
        await analyzer.analyze(image_bytes(fmt="BMP"), "image/bmp")

        kwargs = provider.analyze_image.call_args.kwargs
        assert kwargs["mime_type"] == "image/png"
        with Image.open(io.BytesIO(kwargs["image_data"])) as sent:
            assert sent.format == "PNG"

    @pytest.mark.asyncio
    async def test_unreadable_unsupported_mime(self, analyzer, provider):
        with pytest.raises(EnrichmentError, match="prepare"):
            await analyzer.analyze(b"not a gif", "image/gif")

        provider.analyze_image.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("missing", ["suggestedFilename", "altText", "description"])
    async def test_missing_field(self, analyzer, provider, missing):
        body = json.loads(_payload())
        del body[missing]
        provider.analyze_image.return_value = _response(json.dumps(body))

        with pytest.raises(EnrichmentError):
            await analyzer.analyze(b"x", "image/png")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "content",
        ["", "not json", '{"suggestedFilename": 5, "altText": "a", "description": "d"}', _payload(suggestedFilename="!!!")],
    )
    async def test_malformed_response(self, analyzer, provider, content):
        provider.analyze_image.return_value = _response(content)

        with pytest.raises(EnrichmentError):
            await analyzer.analyze(b"x", "image/png")

    @pytest.mark.asyncio
    async def test_provider_error_is_wrapped(self, analyzer, provider):
        provider.analyze_image.side_effect = LLMError("upstream 500")

        with pytest.raises(EnrichmentError) as exc_info:
            await analyzer.analyze(b"x", "image/png")

        assert isinstance(exc_info.value.cause, LLMError)
        assert "mock" in str(exc_info.value)
