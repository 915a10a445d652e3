"""
Configuration management module.

Provides centralized, type-safe configuration using Pydantic Settings.
All config modules support environment variable mapping with validation.
"""

from chat_relay.configs.gemini import GeminiSettings
from chat_relay.configs.security import SecuritySettings
from chat_relay.configs.session import SessionSettings
from chat_relay.configs.settings import Settings, get_settings

__all__ = [
    "GeminiSettings",
    "SecuritySettings",
    "SessionSettings",
    "Settings",
    "get_settings",
]
