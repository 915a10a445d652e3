"""
Request authentication settings.

Site password (optionally a comma-separated passlist) and the shared secret
used to sign generate requests.

Dependencies: pydantic_settings
System role: Credential and signature configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SecuritySettings(BaseSettings):
    """Credential configuration for the generate endpoint."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    site_password: str = Field(
        default="",
        description="Shared site password, or comma-separated list of accepted passwords. Empty disables the check",
    )
    public_secret_key: str = Field(
        default="",
        description="Secret mixed into request signatures",
    )
    signature_max_age_seconds: int = Field(
        default=0,
        ge=0,
        description="Reject signatures whose timestamp is older than this. 0 disables the window",
    )
