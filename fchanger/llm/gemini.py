"""Google Gemini vision provider implementation."""

import time
from typing import Any

from google import genai
from google.genai import types

from fchanger.llm.base import BaseVisionProvider, LLMResponse, ResponseFormat, TokenUsage
from fchanger.utils.logging import generate_request_id, get_logger

log = get_logger(__name__)


class GeminiProvider(BaseVisionProvider):
    """Google Gemini API provider using official SDK."""

    name = "gemini"

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gemini-3-flash-preview",
        timeout: int = 120,
    ) -> None:
        """Initialize Gemini provider.

        Args:
            api_key: Google API key (defaults to GOOGLE_API_KEY env var)
            model: Model to use (default: gemini-3-flash-preview)
            timeout: Request timeout in seconds
        """
        self.model = model
        self.client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(
                timeout=timeout * 1000,  # Convert to milliseconds
            ),
        )

    async def analyze_image(
        self,
        image_data: bytes,
        prompt: str,
        mime_type: str = "image/png",
        response_format: ResponseFormat | None = None,
    ) -> LLMResponse:
        """Analyze an image using the Gemini API.

        The image goes first and the prompt second, as a list of Parts.
        """
        request_id = generate_request_id()
        start_time = time.perf_counter()

        log.debug(
            "Sending LLM request",
            provider=self.name,
            model=self.model,
            request_id=request_id,
            image_bytes=len(image_data),
        )

        try:
            contents = [
                types.Part.from_bytes(data=image_data, mime_type=mime_type),
                types.Part.from_text(text=prompt),
            ]

            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=contents,  # type: ignore[arg-type]
                config=self._build_generation_config(response_format),
            )

            usage = None
            if getattr(response, "usage_metadata", None):
                usage = TokenUsage(
                    prompt_tokens=response.usage_metadata.prompt_token_count or 0,
                    completion_tokens=response.usage_metadata.candidates_token_count or 0,
                )

            log.debug(
                "LLM response received",
                provider=self.name,
                model=self.model,
                request_id=request_id,
                output_tokens=usage.completion_tokens if usage else 0,
                duration_ms=int((time.perf_counter() - start_time) * 1000),
            )

            return LLMResponse(
                content=response.text or "",
                usage=usage,
                model=self.model,
                finish_reason="stop",
            )

        except Exception as e:
            log.warning(
                "LLM request failed",
                provider=self.name,
                model=self.model,
                request_id=request_id,
                duration_ms=int((time.perf_counter() - start_time) * 1000),
                error_type=type(e).__name__,
            )
            self._handle_api_error(e, "image analysis", log)
            raise  # unreachable, _handle_api_error always raises

    def _build_generation_config(
        self, response_format: ResponseFormat | None = None
    ) -> types.GenerateContentConfig:
        """Build Gemini generation config with optional JSON mode."""
        if response_format and response_format.type in ("json_object", "json_schema"):
            config_kwargs: dict[str, Any] = {
                "response_mime_type": "application/json",
            }
            if response_format.json_schema:
                config_kwargs["response_schema"] = response_format.json_schema
            return types.GenerateContentConfig(**config_kwargs)
        return types.GenerateContentConfig()
