"""Configuration settings using pydantic-settings."""

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict, YamlConfigSettingsSource

from fchanger.config.constants import (
    CONFIG_LOCATIONS,
    DEFAULT_LLM_MODELS,
    DEFAULT_LLM_TIMEOUT,
    DEFAULT_LOG_DIR,
    DEFAULT_MAX_ALT_TEXT_LENGTH,
    DEFAULT_MAX_RETRIES,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_QUALITY,
    DEFAULT_TARGET_FORMAT,
    MAX_BATCH_SIZE,
    PROVIDER_API_KEY_ENV_VARS,
)


class ConversionConfig(BaseModel):
    """Batch conversion defaults."""

    default_format: str = DEFAULT_TARGET_FORMAT
    default_quality: float = Field(default=DEFAULT_QUALITY, ge=0.0, le=1.0)
    max_batch_size: int = Field(default=MAX_BATCH_SIZE, ge=1)

    @field_validator("default_format")
    @classmethod
    def _check_format(cls, value: str) -> str:
        from fchanger.image.formats import SupportedFormat

        return SupportedFormat.parse(value).value


class EnrichmentConfig(BaseModel):
    """Configuration for the metadata enrichment provider."""

    provider: Literal["gemini", "openai"] = "gemini"
    model: str | None = None  # None picks the provider default
    api_key: str | None = None
    api_key_env: str | None = None
    base_url: str | None = None
    timeout: int = DEFAULT_LLM_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES
    max_alt_text_length: int = Field(default=DEFAULT_MAX_ALT_TEXT_LENGTH, ge=1)

    @property
    def effective_model(self) -> str:
        return self.model or DEFAULT_LLM_MODELS[self.provider]

    def resolve_api_key(self) -> str | None:
        """Explicit key first, then the configured or provider-default env var."""
        if self.api_key:
            return self.api_key
        env_name = self.api_key_env or PROVIDER_API_KEY_ENV_VARS.get(self.provider)
        return os.environ.get(env_name) if env_name else None


class OutputConfig(BaseModel):
    """Output configuration."""

    default_dir: str = DEFAULT_OUTPUT_DIR
    on_conflict: Literal["skip", "overwrite", "rename"] = "rename"


class FchangerSettings(BaseSettings):
    """Main configuration class for Fchanger."""

    model_config = SettingsConfigDict(
        env_prefix="FCHANGER_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls, settings_cls, init_settings, env_settings, dotenv_settings, file_secret_settings
    ):
        """Customize settings sources to include YAML file."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            # Later files win, so the working-directory file overrides the user one
            YamlConfigSettingsSource(settings_cls, yaml_file=list(reversed(CONFIG_LOCATIONS))),
            file_secret_settings,
        )

    conversion: ConversionConfig = Field(default_factory=ConversionConfig)
    enrichment: EnrichmentConfig = Field(default_factory=EnrichmentConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    # Global settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_dir: str = DEFAULT_LOG_DIR

    def get_output_dir(self, base_path: Path | None = None) -> Path:
        """Get the output directory path."""
        if base_path:
            return base_path / self.output.default_dir
        return Path(self.output.default_dir)

    def masked_dump(self) -> dict:
        """Dump settings with secrets masked, for display and logging."""
        data = self.model_dump()
        if data["enrichment"].get("api_key"):
            data["enrichment"]["api_key"] = "***"
        return data


@lru_cache
def get_settings() -> FchangerSettings:
    """Get cached settings instance."""
    return FchangerSettings()


def reload_settings() -> FchangerSettings:
    """Force reload settings (clear cache)."""
    get_settings.cache_clear()
    return get_settings()
