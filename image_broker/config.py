# FILE: image_broker/config.py
"""
Configuration management for the image broker
Loads from environment variables with validation
"""
import os
from typing import List, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Backend server
    backend_host: str = Field(default="0.0.0.0", alias="BACKEND_HOST")
    backend_port: int = Field(default=8000, alias="BACKEND_PORT")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    logs_dir: str = Field(default="./logs", alias="LOGS_DIR")

    # Upstream HTTP
    provider_timeout: float = Field(
        default=120.0,
        alias="PROVIDER_TIMEOUT",
        description="Seconds allowed for a single upstream generation call"
    )

    # History store
    history_enabled: bool = Field(default=True, alias="HISTORY_ENABLED")
    history_dir: str = Field(default="./data/history", alias="HISTORY_DIR")
    history_limit: int = Field(default=200, alias="HISTORY_LIMIT")

    # Blob mirror (optional)
    blob_mirror_url: Optional[str] = Field(default=None, alias="BLOB_MIRROR_URL")
    blob_mirror_token: Optional[str] = Field(default=None, alias="BLOB_MIRROR_TOKEN")
    blob_mirror_host: str = Field(
        default="utfs.io",
        alias="BLOB_MIRROR_HOST",
        description="URLs containing this host are already mirrored and are left alone"
    )

    # Telemetry
    telemetry_enabled: bool = Field(default=True, alias="TELEMETRY_ENABLED")

    # Security
    rate_limit_enabled: bool = Field(default=True, alias="RATE_LIMIT_ENABLED")
    rate_limit_rpm: int = Field(default=60, alias="RATE_LIMIT_RPM")
    body_size_limit_mb: int = Field(default=5, alias="BODY_SIZE_LIMIT_MB")

    # CORS
    cors_origins: List[str] = Field(default=["http://localhost:3000"], alias="CORS_ORIGINS")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        v = v.upper()
        if v not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            raise ValueError("log_level must be DEBUG, INFO, WARNING, ERROR or CRITICAL")
        return v

    @field_validator("history_limit")
    @classmethod
    def validate_history_limit(cls, v):
        if v < 1:
            raise ValueError("history_limit must be at least 1")
        return v

    @field_validator("provider_timeout")
    @classmethod
    def validate_provider_timeout(cls, v):
        if v <= 0:
            raise ValueError("provider_timeout must be positive")
        return v

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        os.makedirs(self.logs_dir, exist_ok=True)
        if self.history_enabled:
            os.makedirs(self.history_dir, exist_ok=True)


class ProviderSettings(BaseSettings):
    """
    Upstream credentials and endpoints.

    Never cached: build a fresh snapshot per request with
    load_provider_settings() and pass it explicitly to the selector
    and adapters.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True
    )

    gen_provider: Optional[str] = Field(default=None, alias="GEN_PROVIDER")

    # fal.ai (primary)
    fal_key: Optional[str] = Field(default=None, alias="FAL_KEY")
    fal_base_url: str = Field(default="https://fal.run", alias="FAL_BASE_URL")

    # Google Imagen
    google_api_key: Optional[str] = Field(default=None, alias="GOOGLE_API_KEY")
    google_image_model: str = Field(default="imagen-3.0-generate-002", alias="GOOGLE_IMAGE_MODEL")
    google_api_base: str = Field(
        default="https://generativelanguage.googleapis.com",
        alias="GOOGLE_API_BASE"
    )

    # Banana-style HTTP endpoint
    banana_url: Optional[str] = Field(default=None, alias="BANANA_URL")
    banana_key: Optional[str] = Field(default=None, alias="BANANA_KEY")


def load_provider_settings() -> ProviderSettings:
    """Read a fresh provider settings snapshot from the environment"""
    return ProviderSettings()


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create singleton settings instance"""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings():
    """Reload settings (useful for testing)"""
    global _settings
    _settings = None
    return get_settings()
