"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "audio2features"
    app_env: str = "development"
    debug: bool = True

    # Logging
    log_level: str = "INFO"
    log_format: str = "auto"  # auto (based on app_env), console, or json
    logs_dir: str = "./logs"
    log_to_file: bool = False
    log_file_max_bytes: int = 10 * 1024 * 1024  # 10MB
    log_file_backup_count: int = 5

    # Database (empty string disables relational persistence)
    database_url: str = "sqlite+aiosqlite:///./audio2features.db"

    # Object storage
    storage_type: str = "local"  # local, s3 or none
    storage_local_path: str = "./storage"
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""
    aws_s3_bucket: str = ""
    aws_s3_region: str = ""

    # AI Providers
    ai_provider: str = "openai"  # openai, cloudflare or none
    openai_api_key: str = ""
    cloudflare_account_id: str = ""
    cloudflare_api_token: str = ""
    transcription_model: str | None = None
    generation_model: str | None = None

    # Pipeline
    max_upload_bytes: int = 25 * 1024 * 1024  # 25MB
    generation_max_tokens: int = 900
    generation_temperature: float = 0.2
    transcription_fallback_delay_seconds: float = 0.5
    extraction_fallback_delay_seconds: float = 0.3

    # CORS
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Any) -> list[str]:
        if isinstance(v, str):
            import json
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [origin.strip() for origin in v.split(",")]
        return v

    @field_validator(
        "transcription_fallback_delay_seconds",
        "extraction_fallback_delay_seconds",
    )
    @classmethod
    def require_positive_delay(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("fallback delays must be greater than zero")
        return v

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
