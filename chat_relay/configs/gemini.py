"""
Gemini completion provider settings.

Dependencies: pydantic_settings
System role: Upstream chat model configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GeminiSettings(BaseSettings):
    """Gemini model configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        protected_namespaces=("settings_",),
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    api_key: str | None = Field(
        default=None,
        description="Google AI API key (falls back to GOOGLE_API_KEY when unset)",
    )
    model_name: str = Field(
        default="gemini-2.0-flash",
        description="Gemini model identifier",
    )
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature",
    )
    max_output_tokens: int = Field(
        default=8000,
        gt=0,
        description="Upper bound on generated tokens per response",
    )
