"""
EndpointKit: Application Configuration
========================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
How:   Pydantic Settings reads ENDPOINTKIT_* environment variables (or a .env
       file), validates types/ranges, and provides a singleton `settings`.
Who:   Imported by the app factory, the middleware registry, the response
       dispatcher and the ambient middleware.
When:  Loaded once at import time. Tests build their own Settings instances
       and pass them to create_app().
"""

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    EndpointKit settings loaded from environment variables.

    All settings have defaults suitable for development.
    Attributes are grouped by concern for readability.
    """

    # ── Application ───────────────────────────────────────────────────────
    app_name: str = Field(default="EndpointKit")

    # What: Controls verbosity of application logging
    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Authentication ────────────────────────────────────────────────────
    # What: Policy for endpoints that require auth when no auth gate was
    #       ever registered on their middleware registry.
    # True:  request proceeds unchallenged (a warning is logged at startup)
    # False: request is rejected with 401
    allow_unauthenticated: bool = Field(default=True)

    # ── Response Dispatch ─────────────────────────────────────────────────
    # What: Bytes read per chunk when a STREAM endpoint returns a file object
    stream_chunk_size: int = Field(default=65_536, ge=1024, le=16_777_216)

    # ── HTTP Surface ──────────────────────────────────────────────────────
    # Format: comma-separated origins. Empty disables CORS handling.
    cors_origins: str = Field(default="")

    # What: Minimum body size for GZip compression. 0 disables GZip.
    gzip_minimum_size: int = Field(default=500, ge=0)

    # What: Route of the built-in health endpoint. Empty disables it.
    health_path: str = Field(default="/health")

    request_id_header: str = Field(default="X-Request-ID")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list, dropping blanks."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    model_config = SettingsConfigDict(
        env_prefix="ENDPOINTKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


# Singleton instance used when callers do not pass their own Settings
settings = Settings()
