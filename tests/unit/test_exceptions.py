"""Tests for the exception hierarchy."""

import pytest

from fchanger.exceptions import (
    ConfigurationError,
    DecodeError,
    EncodeError,
    EnrichmentError,
    FchangerError,
    ImageProcessingError,
    InvalidQualityError,
    ItemStateError,
    LLMError,
    ProviderNotFoundError,
    RateLimitError,
    UnsupportedFormatError,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "error",
        [
            DecodeError("bad"),
            EncodeError("avif", "bad"),
            InvalidQualityError(2),
            UnsupportedFormatError("tiff"),
            ItemStateError("bad"),
            EnrichmentError("bad"),
            LLMError("bad"),
            ConfigurationError("bad"),
        ],
    )
    def test_all_derive_from_base(self, error):
        assert isinstance(error, FchangerError)

    def test_image_errors(self):
        assert issubclass(DecodeError, ImageProcessingError)
        assert issubclass(EncodeError, ImageProcessingError)

    def test_value_errors(self):
        assert issubclass(InvalidQualityError, ValueError)
        assert issubclass(UnsupportedFormatError, ValueError)

    def test_llm_errors(self):
        assert issubclass(RateLimitError, LLMError)
        assert issubclass(ProviderNotFoundError, LLMError)


class TestMessages:
    def test_decode_error_with_name(self):
        cause = OSError("truncated")
        error = DecodeError("truncated", name="a.png", cause=cause)
        assert str(error) == "Cannot decode a.png: truncated"
        assert error.cause is cause

    def test_decode_error_without_name(self):
        assert str(DecodeError("empty input")) == "Cannot decode image: empty input"

    def test_encode_error(self):
        error = EncodeError("avif", "no encoder available in this Pillow build")
        assert error.format_name == "avif"
        assert "avif" in str(error)

    def test_invalid_quality(self):
        error = InvalidQualityError(1.5)
        assert error.quality == 1.5
        assert "1.5" in str(error)

    def test_rate_limit(self):
        assert RateLimitError(30).retry_after == 30
        assert str(RateLimitError()) == "Rate limited"
