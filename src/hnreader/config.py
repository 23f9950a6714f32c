"""HN Reader configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Environment
    environment: str = "development"
    log_level: str = "INFO"

    # Cache store
    database_url: str = "sqlite+aiosqlite:///./hnreader.db"
    cache_max_value_bytes: int = 0  # 0 disables the per-value quota

    # OpenAI
    openai_api_key: str = ""
    translation_model: str = "gpt-4o-mini"
    summary_model_fast: str = "gpt-4o-mini"
    summary_model_advanced: str = "gpt-4o"

    # HN API
    hn_api_base_url: str = "https://hacker-news.firebaseio.com/v0"
    hn_max_concurrent: int = 10
    hn_timeout_seconds: int = 10
    story_batch_size: int = 24

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
