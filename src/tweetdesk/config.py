"""Application configuration via Pydantic BaseSettings."""

from __future__ import annotations

from enum import Enum
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    development = "development"
    staging = "staging"
    production = "production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Environment
    ENVIRONMENT: Environment = Environment.development
    APP_VERSION: str = "1.0.0"

    # Logging
    LOG_LEVEL: str = "INFO"

    # Storage (one JSON file per record kind)
    DATA_DIR: str = "data"
    SAMPLE_TRANSCRIPT_PATH: str = "sample-transcript.txt"
    MAX_TRANSCRIPT_CHARS: int = 5_000_000

    # LLM Providers
    ANTHROPIC_API_KEY: str = ""
    OPENAI_API_KEY: str = ""
    LLM_MODEL: str = "anthropic/claude-sonnet-4-20250514"
    LLM_FALLBACK_MODEL: str = "openai/gpt-4o"
    LLM_TIMEOUT: int = 60
    LLM_MAX_RETRIES: int = 0
    LLM_MAX_TOKENS: int = 2000

    # Operator login gate
    AUTH_ENABLED: bool = False
    ADMIN_EMAIL: str = "admin@example.com"
    ADMIN_PASSWORD: str = "admin123"
    JWT_SECRET_KEY: str = "CHANGE-ME-IN-PRODUCTION-use-openssl-rand-hex-32"
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # CORS
    CORS_ALLOWED_ORIGINS: str = "*"


@lru_cache
def get_settings() -> Settings:
    """Singleton settings instance."""
    return Settings()
