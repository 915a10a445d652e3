"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from chat_relay.configs.base import BaseSettings
from chat_relay.configs.gemini import GeminiSettings
from chat_relay.configs.security import SecuritySettings
from chat_relay.configs.session import SessionSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    security: SecuritySettings = Field(default_factory=SecuritySettings)
    gemini: GeminiSettings = Field(default_factory=GeminiSettings)
    session: SessionSettings = Field(default_factory=SessionSettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from chat_relay.configs import get_settings
        settings = get_settings()
    """
    return Settings()
