"""Application settings using pydantic-settings.

Loads configuration from environment variables with .env file support.
"""

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process-wide configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,  # Allow both field name and alias
    )

    # Environment
    environment: Literal["development", "staging", "production", "testing"] = Field(
        default="development",
        validation_alias=AliasChoices("environment", "node_env"),
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Per-user key decryption
    secrets_encryption_key: SecretStr = Field(
        default=SecretStr(""),
        description="Secret used to decrypt per-user provider API keys (required for BYOK users)",
    )

    # Allow-list of users permitted to use platform credentials
    restrict_to_auth: bool = Field(
        default=False,
        description="In production, only users in allowed_users_list may use platform keys",
        validation_alias=AliasChoices("restrict_to_auth", "restrict_to_langchain_auth"),
    )
    allowed_users_list: str = Field(
        default="",
        description="JSON array of user logins allowed to use platform credentials",
    )

    # Provider routing
    qwen_use_international: bool = Field(
        default=False,
        description="Route Qwen through the international DashScope endpoint",
    )
    openrouter_base_url: str = Field(
        default="https://openrouter.ai/api/v1",
        description="OpenRouter API base URL",
    )
    openrouter_referer: str = Field(
        default="https://github.com/langchain-ai/open-swe",
        description="HTTP-Referer header sent to OpenRouter",
    )
    openrouter_title: str = Field(default="Open SWE", description="X-Title header sent to OpenRouter")
    openrouter_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Per-request timeout for OpenRouter calls",
    )

    # Platform-shared credentials (used for allow-listed users)
    openai_api_key: SecretStr = Field(default=SecretStr(""))
    anthropic_api_key: SecretStr = Field(default=SecretStr(""))
    google_api_key: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices("google_api_key", "gemini_api_key"),
    )
    moonshot_api_key: SecretStr = Field(default=SecretStr(""))
    deepseek_api_key: SecretStr = Field(default=SecretStr(""))
    qwen_api_key: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices("qwen_api_key", "dashscope_api_key"),
    )
    zai_api_key: SecretStr = Field(default=SecretStr(""))
    openrouter_api_keys: str = Field(
        default="",
        description="Comma-separated pool of platform OpenRouter API keys",
    )

    # Circuit breaker
    circuit_breaker_failure_threshold: int = Field(
        default=2,
        ge=1,
        description="Consecutive failures before a model's circuit opens",
    )
    circuit_breaker_timeout_ms: int = Field(
        default=180_000,
        ge=0,
        description="Milliseconds an open circuit waits before recovering",
    )

    def openrouter_key_pool(self) -> list[str]:
        """Platform OpenRouter keys as a list (empty entries dropped)."""
        return [key.strip() for key in self.openrouter_api_keys.split(",") if key.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are loaded once and reused.
    """
    return Settings()
