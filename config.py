"""
Configuration for the Hysio pre-intake service.

GOVERNANCE:
- No LLM configuration
- No patient data in settings or logs
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: list[str] = ["http://localhost:3000"]
    log_level: str = "INFO"

    # Pre-intake lifecycle
    draft_expiration_days: int = 30

    # Red-flag thresholds
    age_red_flag_threshold: int = 50
    high_intensity_threshold: int = 7

    # Submission list pagination
    submissions_default_limit: int = 50
    submissions_max_limit: int = 200

    model_config = {"env_prefix": "HYSIO_PRE_INTAKE_"}


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
