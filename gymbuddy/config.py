"""
Configuration Management

Uses Pydantic BaseSettings to load configuration from environment variables.
All settings can be overridden via .env file or environment variables.

Environment Variables:
    SCHEDULING_API_URL: Base URL of the scheduling backend
    SCHEDULING_API_TIMEOUT: Request timeout in seconds (default: 10)
    USER_DIRECTORY: JSON object mapping platform user ids to emails
    ANTHROPIC_API_KEY: API key for the conversational fallback
    APP_ENV: Environment name (development/staging/production)
    DEBUG: Enable debug mode (default: False)
"""

import json
from functools import cached_property, lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application Environment
    app_env: Literal["development", "staging", "production"] = "development"
    """Current application environment.

    Options:
    - development: Local development, verbose errors
    - staging: Pre-production testing environment
    - production: Live environment, error details hidden
    """

    debug: bool = False
    """Enable debug mode (DEBUG log level, detailed error responses)."""

    # Application Configuration
    app_name: str = "gymbuddy"
    """Application name."""

    host: str = "0.0.0.0"
    """Host to bind the application server."""

    port: int = 8000
    """Port to bind the application server."""

    # CORS Configuration
    cors_origins: str = "http://localhost:3000"
    """Comma-separated list of allowed CORS origins."""

    # Scheduling Backend
    scheduling_api_url: str = "http://localhost:3001/api"
    """Base URL of the scheduling API (users, availability, sessions)."""

    scheduling_api_timeout: float = 10.0
    """Request timeout for the scheduling API in seconds."""

    # Identity
    user_directory: str = ""
    """Platform user id -> scheduling account email.

    Given as JSON, e.g. USER_DIRECTORY='{"1195143765": "ivan@example.com"}'.
    Unknown users get a fixed "not linked" reply.
    """

    # Conversational Fallback (Anthropic)
    anthropic_api_key: str = ""
    """Anthropic API key. Empty disables the LLM, fixed replies are used."""

    chat_model: str = "claude-haiku-4-5-20251001"
    """Model for general chat replies."""

    chat_fallback_model: str = "claude-sonnet-4-5-20250929"
    """Model used when the primary model is unavailable."""

    chat_max_tokens: int = 300
    """Max tokens for a chat reply."""

    chat_temperature: float = 0.7
    """Sampling temperature for chat replies."""

    # Pydantic configuration
    model_config = SettingsConfigDict(
        env_file=".env",  # Load from .env file if it exists
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env == "development"

    @property
    def cors_origins_list(self) -> list[str]:
        """Split cors_origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @field_validator("user_directory")
    @classmethod
    def validate_user_directory(cls, v: str) -> str:
        """Reject anything but a JSON object of user id -> email."""
        if not v.strip():
            return ""
        try:
            parsed = json.loads(v)
        except ValueError as e:
            raise ValueError(f"USER_DIRECTORY is not valid JSON: {e}") from e
        if not isinstance(parsed, dict):
            raise ValueError("USER_DIRECTORY must be a JSON object of user id -> email")
        return v

    @cached_property
    def user_directory_map(self) -> dict[str, str]:
        """Parsed user_directory (empty if unset)."""
        if not self.user_directory:
            return {}
        return {str(k): str(v) for k, v in json.loads(self.user_directory).items()}

    @property
    def chat_enabled(self) -> bool:
        """Check if the LLM fallback is configured."""
        return bool(self.anthropic_api_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: Cached settings instance

    Example:
        >>> from gymbuddy.config import get_settings
        >>> settings = get_settings()
        >>> print(settings.scheduling_api_url)
        http://localhost:3001/api
    """
    return Settings()


# Module-level settings instance for easy imports
settings = get_settings()
