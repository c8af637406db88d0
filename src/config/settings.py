"""
Centralized settings management using pydantic-settings.

All environment variables and configuration values are defined here.
Use get_settings() to access the singleton settings instance.
"""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Nothing is required; every value has a working default.

    Optional environment variables:
        - ENVIRONMENT: Environment name (development, staging, production)
        - LOG_LEVEL: Minimum log level (default: INFO)
        - HOST / PORT: Server bind address (default: 0.0.0.0:8080)
        - COMPATIBILITY_TABLES_PATH: JSON table file replacing the packaged one
        - MAX_ALTERNATIVES: Number of swap suggestions returned (default: 3)
        - MIN_IMPROVEMENT: Score gain a swap must exceed (default: 0.3)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Environment
    # ==========================================================================
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Minimum log level")

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in ("development", "dev", "local")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in ("production", "prod")

    @field_validator("log_level", mode="before")
    @classmethod
    def parse_log_level(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    # ==========================================================================
    # Server Configuration
    # ==========================================================================
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8080, description="Server port")

    # CORS Configuration
    cors_origins: List[str] = Field(
        default=[
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
        ],
        description="Allowed CORS origins"
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # ==========================================================================
    # Compatibility Tables
    # ==========================================================================
    compatibility_tables_path: Optional[str] = Field(
        default=None,
        description="Path to a compatibility table JSON file (packaged table if unset)"
    )

    @property
    def compatibility_tables_file(self) -> Optional[Path]:
        if self.compatibility_tables_path:
            return Path(self.compatibility_tables_path)
        return None

    # ==========================================================================
    # Alternative Suggestions
    # ==========================================================================
    max_alternatives: int = Field(
        default=3,
        ge=1,
        le=20,
        description="Maximum number of swap suggestions returned"
    )
    min_improvement: float = Field(
        default=0.3,
        ge=0.0,
        le=10.0,
        description="A swap must raise the score by strictly more than this"
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Uses lru_cache to ensure only one instance is created.
    Settings are loaded from environment variables and .env file.

    Returns:
        Settings: The application settings instance
    """
    # .env in the project root
    env_file = Path(__file__).parent.parent.parent / ".env"
    return Settings(_env_file=env_file if env_file.exists() else None)


def get_settings_for_testing(**overrides) -> Settings:
    """
    Create a settings instance for testing with optional overrides.

    This bypasses the cache to allow different settings in tests.

    Args:
        **overrides: Setting values to override

    Returns:
        Settings: A new settings instance with overrides applied
    """
    test_defaults = {
        "environment": "testing",
        "debug": True,
    }
    test_defaults.update(overrides)

    return Settings(**test_defaults)
