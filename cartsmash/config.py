from __future__ import annotations

from functools import lru_cache
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from pydantic import Field, field_validator
from typing import Annotated, List


class Settings(BaseSettings):
    # Core
    app_name: str = Field(default="cartsmash")
    environment: str = Field(default="dev")  # dev|staging|prod
    log_json: bool = Field(default=True)
    log_level: str = Field(default="INFO")

    # Auth
    auth_required: bool = Field(default=False)
    auth_issuer: str | None = Field(default=None)
    auth_jwks_url: str | None = Field(default=None)
    auth_audience: str | None = Field(default=None)
    auth_disable_verification: bool = Field(default=False)

    # Cart storage
    redis_url: str | None = Field(default=None)
    cart_ttl_seconds: int = Field(default=7 * 24 * 3600, ge=60)

    # Parsing
    category_table_path: str | None = Field(default=None)
    split_on_separators: bool = Field(default=False)

    # API
    cors_allowed_origins: Annotated[List[str], NoDecode] = Field(default_factory=lambda: ["*"])
    parse_rate_limit: str = Field(default="30/minute")

    # Observability
    metrics_enabled: bool = Field(default=True)
    sentry_dsn: str | None = Field(default=None)
    sentry_traces_sample_rate: float = Field(default=0.0)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("cors_allowed_origins", mode="before")
    @classmethod
    def _csv_to_list(cls, v):
        if isinstance(v, str):
            return [s.strip() for s in v.split(",") if s.strip()]
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
