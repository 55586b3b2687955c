"""Configuration management for the branch reports service."""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = Field(default="Branch Reports Service")
    version: str = Field(default="0.1.0")
    docs_url: str | None = Field(default="/docs")
    redoc_url: str | None = Field(default="/redoc")
    openapi_url: str = Field(default="/openapi.json")

    database_url: str = Field(default="postgresql+psycopg://reports:reports@db:5432/school_admin")
    database_pool_size: int = Field(default=5, ge=1)
    database_statement_timeout_ms: int | None = Field(default=15000)

    log_config_path: str | None = Field(default=None)
    log_level: str = Field(default="INFO")

    aws_region: str = Field(default="us-east-1")
    s3_endpoint_url: str | None = Field(default=None)
    s3_connect_timeout_seconds: float = Field(default=5.0)
    s3_read_timeout_seconds: float = Field(default=30.0)
    report_bucket: str = Field(default="reports")
    report_url_expiry_seconds: int = Field(default=3600)

    default_currency: str = Field(default="AFN", min_length=3, max_length=3)
    report_repeat_header: bool = Field(default=False)
    report_query_timeout_seconds: float = Field(default=15.0)
    report_upload_timeout_seconds: float = Field(default=30.0)
    report_ledger_timeout_seconds: float = Field(default=10.0)

    identity_jwt_secret: str = Field(default="dev-identity-secret-change-me")
    identity_jwt_algorithm: str = Field(default="HS256")
    identity_jwt_audience: str | None = Field(default="authenticated")

    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    enable_metrics: bool = Field(default=True)
    enable_tracing: bool = Field(default=True)
    otel_exporter_endpoint: str | None = Field(default=None)

    scheduler_include_branches: bool = Field(default=True)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()


__all__ = ["Settings", "get_settings"]
