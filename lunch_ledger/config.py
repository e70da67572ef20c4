"""Configuration management using Pydantic Settings"""

from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LUNCH_LEDGER_",
        extra="ignore",
    )

    # Sources
    source_backend: Literal["http", "database"] = "http"
    experience_api_base: str = "http://localhost:8001"
    database_url: str = "sqlite:///./lunch_ledger.db"

    # Session
    active_user_id: Optional[str] = None

    # Service
    service_name: str = "lunch-ledger"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 5.0
    http_max_attempts: int = 3
    http_backoff_base: float = 0.5  # Exponential backoff base in seconds

    # Engine
    refresh_interval_seconds: float = 300.0  # 5 minutes between background recomputes


settings = Settings()
