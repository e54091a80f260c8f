"""Application configuration using Pydantic Settings.

This module defines all application configuration loaded from environment variables.
Configuration is validated at startup and provides type-safe access throughout the app.

Admin-editable settings (channels, models, prompt policy, pricing) live in the
YAML site configuration, see app.core.config_loader.
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Application configuration.

    All configuration is loaded from environment variables or .env file.
    Validation happens automatically via Pydantic.

    Example:
        >>> config = Config()
        >>> print(config.app_name)
        'SoraStudio'
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ============================================
    # Application Settings
    # ============================================
    app_name: str = Field(default="SoraStudio", description="Application name")
    app_env: Literal["development", "staging", "production"] = Field(
        default="development", description="Application environment"
    )
    debug: bool = Field(default=False, description="Debug mode")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )

    # ============================================
    # Site Configuration
    # ============================================
    site_config_path: str = Field(
        default="config/site.yaml",
        description="YAML file with channels, models, prompt policy and pricing",
    )

    # ============================================
    # Sora Upstream
    # ============================================
    sora_base_url: str = Field(default="", description="Native Sora API base URL")
    sora_api_key: str = Field(default="", description="Native Sora API key")
    sora_backend_url: str = Field(
        default="", description="Sora backend URL for unwatermarked link retrieval"
    )
    sora_backend_token: str = Field(default="", description="Sora backend token")
    sora_poll_interval_seconds: float = Field(
        default=3.0, description="Polling interval for native video jobs", gt=0
    )
    sora_max_poll_seconds: int = Field(
        default=900, description="Maximum time to wait for a native video job", ge=1
    )
    sora_poll_max_errors: int = Field(
        default=3, description="Consecutive status poll failures before giving up", ge=1
    )

    # ============================================
    # Outbound HTTP
    # ============================================
    http_timeout: float = Field(default=300.0, description="Upstream request timeout", gt=0)
    http_max_retries: int = Field(
        default=2, description="Retries for failed upstream requests", ge=0, le=10
    )
    http_retry_backoff: float = Field(
        default=1.0, description="Base backoff in seconds between retries", ge=0
    )

    # ============================================
    # API Server
    # ============================================
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=8000, description="API server port", ge=1, le=65535)

    # ============================================
    # CORS Settings
    # ============================================
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8000"],
        description="Allowed CORS origins",
    )
    cors_allow_credentials: bool = Field(default=True, description="Allow CORS credentials")

    @field_validator("sora_base_url", "sora_backend_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize upstream URLs so paths can be appended directly.

        Args:
            v: URL string

        Returns:
            URL without surrounding whitespace or trailing slash
        """
        if isinstance(v, str):
            return v.strip().rstrip("/")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode.

        Returns:
            True if app_env is 'development'
        """
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode.

        Returns:
            True if app_env is 'production'
        """
        return self.app_env == "production"


# =============================================================================
# Singleton accessor
# =============================================================================

_config: Config | None = None


def get_config() -> Config:
    """Get the global Config singleton.

    This function provides a lazy-loaded singleton instance of Config.
    Use this instead of importing `container.config()` to avoid circular imports.

    Returns:
        The global Config instance
    """
    global _config
    if _config is None:
        _config = Config()
    return _config
