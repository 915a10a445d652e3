"""
Pending exchange store settings.

Dependencies: pydantic_settings
System role: Session broker configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SessionSettings(BaseSettings):
    """Lifetime settings for registered-but-unconsumed exchanges."""

    model_config = SettingsConfigDict(
        env_prefix="SESSION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    ttl_seconds: float = Field(
        default=0,
        ge=0,
        description="Evict unconsumed exchanges older than this. 0 keeps them until consumed",
    )
