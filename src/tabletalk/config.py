"""
TableTalk Configuration Module.

Handles all application settings and environment configuration.
Uses pydantic-settings for validation and type safety.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SupabaseSettings(BaseSettings):
    """Supabase configuration for authentication and conversation storage."""

    model_config = SettingsConfigDict(env_prefix="SUPABASE_")

    enabled: bool = Field(
        default=False,
        description="Persist conversations and uploaded files in Supabase. When false, in-process stores are used.",
    )
    url: str = Field(default="https://demo.supabase.co", description="Supabase project URL")
    service_role_key: str = Field(default="demo-service-role-key", description="Supabase service role key")
    jwt_secret: str = Field(default="demo-jwt-secret-for-development-only", description="JWT secret for token validation")
    storage_bucket: str = Field(default="data-files", description="Storage bucket holding raw uploaded files")


class GeminiSettings(BaseSettings):
    """Gemini API configuration."""

    model_config = SettingsConfigDict(env_prefix="GEMINI_")

    api_key: str = Field(default="", description="Gemini API Key")
    model: str = Field(default="gemini-2.0-flash", description="Model used for every intent")


class ReasoningSettings(BaseSettings):
    """Reasoning service selection."""

    model_config = SettingsConfigDict(env_prefix="REASONING_")

    provider: Literal["gemini", "http"] = Field(
        default="gemini",
        description="'gemini' calls the Gemini Developer API directly, 'http' posts to a remote assistant function",
    )
    url: str = Field(
        default="http://localhost:54321/functions/v1/ai-data-assistant",
        description="Remote assistant endpoint (provider=http)",
    )
    timeout_seconds: float = Field(default=60.0, description="HTTP timeout for a single completion")


class SamplingSettings(BaseSettings):
    """How many leading rows go into each prompt."""

    model_config = SettingsConfigDict(env_prefix="SAMPLING_")

    analysis_sample_rows: int = Field(default=10, ge=0)
    answer_sample_rows: int = Field(default=20, ge=0)


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_env: Literal["development", "staging", "production"] = "development"
    app_debug: bool = False
    app_log_level: str = "INFO"

    # Auth (local convenience)
    auth_insecure_dev_bypass: bool = Field(
        default=False,
        description="If true (and not production), accept any Bearer token without JWT validation. Intended for local development only.",
        validation_alias="AUTH_INSECURE_DEV_BYPASS",
    )

    max_upload_bytes: int = Field(
        default=20 * 1024 * 1024,
        description="Uploads larger than this are rejected before parsing.",
        validation_alias="MAX_UPLOAD_BYTES",
    )

    # Nested settings
    supabase: SupabaseSettings = Field(default_factory=SupabaseSettings)
    gemini: GeminiSettings = Field(default_factory=GeminiSettings)
    reasoning: ReasoningSettings = Field(default_factory=ReasoningSettings)
    sampling: SamplingSettings = Field(default_factory=SamplingSettings)

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
