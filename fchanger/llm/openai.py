"""OpenAI vision provider implementation."""

import base64
from typing import Any

from openai import AsyncOpenAI

from fchanger.llm.base import BaseVisionProvider, LLMResponse, ResponseFormat, TokenUsage
from fchanger.utils.logging import get_logger

log = get_logger(__name__)


class OpenAIProvider(BaseVisionProvider):
    """OpenAI API provider using official SDK."""

    name = "openai"

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gpt-5.2",
        base_url: str | None = None,
        timeout: int = 60,
        max_retries: int = 3,
    ) -> None:
        """Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key (defaults to OPENAI_API_KEY env var)
            model: Model to use (default: gpt-5.2)
            base_url: Optional custom base URL (for proxies/compatible APIs)
            timeout: Request timeout in seconds
            max_retries: Maximum number of retries
        """
        self.model = model
        self.client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=max_retries,
        )

    async def analyze_image(
        self,
        image_data: bytes,
        prompt: str,
        mime_type: str = "image/png",
        response_format: ResponseFormat | None = None,
    ) -> LLMResponse:
        """Analyze an image with a chat completion carrying a base64 data URL."""
        b64_image = base64.b64encode(image_data).decode("utf-8")
        request_params: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {
                            "type": "image_url",
                            "image_url": {"url": f"data:{mime_type};base64,{b64_image}"},
                        },
                    ],
                }
            ],
        }
        if response_format and response_format.type != "text":
            # Schema is carried in the prompt; json_object keeps compatible APIs working
            request_params["response_format"] = {"type": "json_object"}

        try:
            response = await self.client.chat.completions.create(**request_params)
        except Exception as e:
            self._handle_api_error(e, "image analysis", log)
            raise  # unreachable, _handle_api_error always raises

        choice = response.choices[0]
        usage = None
        if response.usage:
            usage = TokenUsage(
                prompt_tokens=response.usage.prompt_tokens,
                completion_tokens=response.usage.completion_tokens,
            )

        return LLMResponse(
            content=choice.message.content or "",
            usage=usage,
            model=response.model,
            finish_reason=choice.finish_reason or "stop",
        )
