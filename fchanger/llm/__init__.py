"""Vision LLM providers for Fchanger."""

from fchanger.config.constants import PROVIDER_API_KEY_ENV_VARS
from fchanger.config.settings import EnrichmentConfig
from fchanger.exceptions import ConfigurationError, ProviderNotFoundError
from fchanger.llm.base import BaseVisionProvider, LLMResponse, ResponseFormat, TokenUsage


def create_provider(config: EnrichmentConfig) -> BaseVisionProvider:
    """Build the configured provider.

    Raises:
        ConfigurationError: No API key could be resolved
        ProviderNotFoundError: Unknown provider name
    """
    api_key = config.resolve_api_key()
    if not api_key:
        env_name = config.api_key_env or PROVIDER_API_KEY_ENV_VARS.get(config.provider, "API key")
        raise ConfigurationError(
            f"No API key for provider '{config.provider}'. "
            f"Set enrichment.api_key or the {env_name} environment variable."
        )

    if config.provider == "gemini":
        from fchanger.llm.gemini import GeminiProvider

        return GeminiProvider(api_key=api_key, model=config.effective_model, timeout=config.timeout)

    if config.provider == "openai":
        from fchanger.llm.openai import OpenAIProvider

        return OpenAIProvider(
            api_key=api_key,
            model=config.effective_model,
            base_url=config.base_url,
            timeout=config.timeout,
            max_retries=config.max_retries,
        )

    raise ProviderNotFoundError(f"Unknown provider: {config.provider}")


__all__ = [
    "BaseVisionProvider",
    "LLMResponse",
    "ResponseFormat",
    "TokenUsage",
    "create_provider",
]
