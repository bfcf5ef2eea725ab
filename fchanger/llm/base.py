"""Base classes for vision LLM providers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from fchanger.utils.logging import BoundLogger


@dataclass
class ResponseFormat:
    """Configuration for structured output format.

    Supports:
    - OpenAI: response_format={"type": "json_object"}
    - Gemini: response_mime_type="application/json" with response_schema
    """

    type: Literal["json_object", "json_schema", "text"] = "json_object"
    json_schema: dict[str, Any] | None = None


@dataclass
class TokenUsage:
    """Token usage information."""

    prompt_tokens: int
    completion_tokens: int

    @property
    def total_tokens(self) -> int:
        """Total tokens used."""
        return self.prompt_tokens + self.completion_tokens


@dataclass
class LLMResponse:
    """Response from an LLM."""

    content: str
    usage: TokenUsage | None
    model: str
    finish_reason: str


class BaseVisionProvider(ABC):
    """Abstract base class for providers that can look at an image."""

    name: str = "base"
    model: str

    @abstractmethod
    async def analyze_image(
        self,
        image_data: bytes,
        prompt: str,
        mime_type: str = "image/png",
        response_format: ResponseFormat | None = None,
    ) -> LLMResponse:
        """Analyze an image.

        Args:
            image_data: Raw image bytes
            prompt: Instruction for the model
            mime_type: MIME type of ``image_data``
            response_format: Optional structured output request

        Returns:
            LLM response with the model's answer
        """
        ...

    def _handle_api_error(
        self,
        error: Exception,
        operation: str,
        log: "BoundLogger",
    ) -> None:
        """Raise RateLimitError or LLMError for a caught provider exception.

        Raises:
            RateLimitError: If the error indicates a rate limit
            LLMError: For all other errors
        """
        from fchanger.exceptions import LLMError, RateLimitError

        error_str = str(error).lower()
        if "rate_limit" in error_str or "rate limit" in error_str or "429" in error_str:
            raise RateLimitError() from error
        log.error(f"{self.name} {operation} error", error=str(error))
        raise LLMError(f"{self.name} {operation} error: {error}") from error
