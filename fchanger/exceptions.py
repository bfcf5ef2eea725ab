"""Custom exceptions for Fchanger."""


class FchangerError(Exception):
    """Base exception class for Fchanger."""

    pass


class ImageProcessingError(FchangerError):
    """Error while turning source bytes into target bytes."""

    pass


class DecodeError(ImageProcessingError):
    """Source bytes are empty, corrupt or not a decodable raster image."""

    def __init__(self, message: str, name: str | None = None, cause: Exception | None = None) -> None:
        self.name = name
        self.cause = cause
        prefix = f"Cannot decode {name}: " if name else "Cannot decode image: "
        super().__init__(prefix + message)


class EncodeError(ImageProcessingError):
    """The target encoder could not produce output."""

    def __init__(self, format_name: str, message: str, cause: Exception | None = None) -> None:
        self.format_name = format_name
        self.cause = cause
        super().__init__(f"Encoding to {format_name} failed: {message}")


class InvalidQualityError(FchangerError, ValueError):
    """Quality scalar outside [0.0, 1.0]."""

    def __init__(self, quality: object) -> None:
        self.quality = quality
        super().__init__(f"Quality must be a number between 0.0 and 1.0, got {quality!r}")


class UnsupportedFormatError(FchangerError, ValueError):
    """Format name is not one of the supported target formats."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"Unsupported image format: {value!r}")


class ItemStateError(FchangerError):
    """Operation invoked on an item in the wrong state (programming error)."""

    pass


class EnrichmentError(FchangerError):
    """Metadata enrichment failed or returned malformed data."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.cause = cause
        super().__init__(message)


class LLMError(FchangerError):
    """LLM-related error."""

    pass


class RateLimitError(LLMError):
    """Rate limit exceeded."""

    def __init__(self, retry_after: int | None = None) -> None:
        self.retry_after = retry_after
        message = f"Rate limited, retry after {retry_after}s" if retry_after else "Rate limited"
        super().__init__(message)


class ProviderNotFoundError(LLMError):
    """No valid LLM provider available."""

    def __init__(self, message: str = "No valid LLM provider available") -> None:
        super().__init__(message)


class ConfigurationError(FchangerError):
    """Configuration error."""

    pass
