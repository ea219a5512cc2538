"""
Configuration module using Pydantic Settings.

Loads the OpenAI credential, context size limit and guidance directory from
environment variables. Supports .env files for local development.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MAX_CONTEXT_CHARS = 18000


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # OpenAI
    openai_api_key: str = ""
    openai_chat_model: str = "gpt-4o"
    openai_base_url: str | None = None

    # Guidance context
    max_context_chars: int = Field(DEFAULT_MAX_CONTEXT_CHARS, gt=0)
    guidance_dir: str | None = None

    # Application Insights
    applicationinsights_connection_string: str = ""

    # App
    log_level: str = "INFO"
    allowed_origins: str = "http://localhost:3000"

    @property
    def cors_origins(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.allowed_origins.split(",")]


def get_settings() -> Settings:
    """Factory for settings instance."""
    return Settings()
