"""Application configuration using pydantic-settings."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Anthropic (risk analysis provider)
    anthropic_api_key: Optional[str] = None
    claude_model: str = "claude-sonnet-4-20250514"
    analysis_max_tokens: int = 4000

    # Deadline for the provider before the fallback analyzer takes over
    analysis_timeout_seconds: float = 11.0
    health_check_timeout_seconds: float = 5.0

    # Fallback heuristics (risk scores, 0-10)
    fallback_single_supplier_risk: int = Field(8, ge=0, le=10)
    fallback_diversified_supplier_risk: int = Field(5, ge=0, le=10)
    fallback_elevated_logistics_risk: int = Field(7, ge=0, le=10)
    fallback_baseline_logistics_risk: int = Field(4, ge=0, le=10)
    fallback_elevated_geopolitical_risk: int = Field(7, ge=0, le=10)
    fallback_baseline_geopolitical_risk: int = Field(4, ge=0, le=10)

    # CORS
    cors_origins: str = "http://localhost:5173"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings for testing."""
    global _settings
    _settings = None
