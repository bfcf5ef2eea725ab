"""Tests for OpenAI vision provider."""

import base64
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from fchanger.exceptions import LLMError, RateLimitError
from fchanger.llm.base import ResponseFormat
from fchanger.llm.openai import OpenAIProvider


def _completion(content: str | None, finish_reason: str | None = "stop", usage=True) -> MagicMock:
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    response.choices[0].finish_reason = finish_reason
    response.model = "gpt-5.2"
    response.usage = MagicMock(prompt_tokens=300, completion_tokens=40) if usage else None
    return response


class TestOpenAIProviderInit:
    """Tests for OpenAIProvider initialization."""

    def test_init_default(self):
        """Test default initialization."""
        with patch("fchanger.llm.openai.AsyncOpenAI") as mock_client:
            provider = OpenAIProvider(api_key="sk-test")

            assert provider.model == "gpt-5.2"
            mock_client.assert_called_once_with(
                api_key="sk-test",
                base_url=None,
                timeout=60,
                max_retries=3,
            )

    def test_init_custom_params(self):
        with patch("fchanger.llm.openai.AsyncOpenAI") as mock_client:
            provider = OpenAIProvider(
                api_key="sk-custom",
                model="gpt-4o",
                base_url="https://custom.api.com",
                timeout=30,
                max_retries=5,
            )

            assert provider.model == "gpt-4o"
            mock_client.assert_called_once_with(
                api_key="sk-custom",
                base_url="https://custom.api.com",
                timeout=30,
                max_retries=5,
            )


class TestOpenAIProviderAnalyzeImage:
    """Tests for OpenAIProvider.analyze_image method."""

    @pytest.fixture
    def provider(self):
        """Create a provider with mocked client."""
        with patch("fchanger.llm.openai.AsyncOpenAI"):
            provider = OpenAIProvider(api_key="sk-test")
            provider.client = AsyncMock()
            return provider

    @pytest.mark.asyncio
    async def test_analyze_image_success(self, provider):
        provider.client.chat.completions.create = AsyncMock(return_value=_completion('{"a": 1}'))

        response = await provider.analyze_image(b"\x89PNG", "Describe")

        assert response.content == '{"a": 1}'
        assert response.usage.prompt_tokens == 300
        assert response.finish_reason == "stop"

    @pytest.mark.asyncio
    async def test_sends_data_url(self, provider):
        provider.client.chat.completions.create = AsyncMock(return_value=_completion("{}"))

        await provider.analyze_image(b"webpdata", "Describe", mime_type="image/webp")

        kwargs = provider.client.chat.completions.create.call_args.kwargs
        content = kwargs["messages"][0]["content"]
        assert content[0] == {"type": "text", "text": "Describe"}
        expected = "data:image/webp;base64," + base64.b64encode(b"webpdata").decode()
        assert content[1]["image_url"]["url"] == expected
        assert "response_format" not in kwargs

    @pytest.mark.asyncio
    async def test_json_mode(self, provider):
        provider.client.chat.completions.create = AsyncMock(return_value=_completion("{}"))

        await provider.analyze_image(
            b"x", "p", response_format=ResponseFormat(type="json_schema", json_schema={})
        )

        kwargs = provider.client.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}

    @pytest.mark.asyncio
    async def test_missing_content_and_usage(self, provider):
        provider.client.chat.completions.create = AsyncMock(
            return_value=_completion(None, finish_reason=None, usage=False)
        )

        response = await provider.analyze_image(b"x", "p")

        assert response.content == ""
        assert response.finish_reason == "stop"
        assert response.usage is None

    @pytest.mark.asyncio
    async def test_rate_limit_error(self, provider):
        provider.client.chat.completions.create = AsyncMock(
            side_effect=Exception("Error code: 429 - rate_limit_exceeded")
        )

        with pytest.raises(RateLimitError):
            await provider.analyze_image(b"x", "p")

    @pytest.mark.asyncio
    async def test_generic_error(self, provider):
        provider.client.chat.completions.create = AsyncMock(side_effect=Exception("boom"))

        with pytest.raises(LLMError, match="openai image analysis error: boom"):
            await provider.analyze_image(b"x", "p")

