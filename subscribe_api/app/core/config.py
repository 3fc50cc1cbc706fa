"""Configuration for the subscribe API using pydantic-settings."""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent.parent


class ConfigurationError(RuntimeError):
    """Raised when a required startup value is missing or unusable."""


class AppEnv(StrEnum):
    DEV = "dev"
    PRODUCTION = "production"


_DEV_ALIASES = {"dev", "development", "local", "localhost"}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )

    # --- Environment ---
    app_env: AppEnv = Field(
        default=AppEnv.PRODUCTION,
        validation_alias=AliasChoices("APP_ENV", "ENV"),
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @field_validator("app_env", mode="before")
    @classmethod
    def normalize_env(cls, v: Any) -> AppEnv:
        if isinstance(v, str) and v.strip().lower() in _DEV_ALIASES:
            return AppEnv.DEV
        return AppEnv.PRODUCTION

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def parse_list(cls, v: Any) -> list[str]:
        if isinstance(v, str):
            v_stripped = v.strip()
            if not v_stripped:
                return []
            if v_stripped.startswith("[") and v_stripped.endswith("]"):
                import json
                try:
                    return json.loads(v_stripped)
                except ValueError:
                    pass
            return [x.strip() for x in v_stripped.split(",") if x.strip()]
        return v or []

    @property
    def is_dev(self) -> bool:
        return self.app_env == AppEnv.DEV

    # --- HTTP ---
    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=5000, validation_alias="PORT")
    static_dir: Path = Field(default=PROJECT_ROOT / "public", validation_alias="STATIC_DIR")
    allowed_origins: Any = Field(default_factory=lambda: ["*"], validation_alias="ALLOWED_ORIGINS")

    # --- Database ---
    database_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("DATABASE_URL", "SUBSCRIBE_DATABASE_URL"),
    )
    db_use_ssl: bool = Field(default=False, validation_alias="PG_USE_SSL")
    db_ssl_ca_path: Path | None = Field(default=None, validation_alias="PG_SSL_CA")
    db_ssl_ca_cert: str | None = Field(default=None, validation_alias="PG_SSL_CA_CERT")
    db_ssl_insecure: bool = Field(default=False, validation_alias="PG_SSL_INSECURE")

    @field_validator("db_ssl_ca_path", "db_ssl_ca_cert", mode="before")
    @classmethod
    def blank_as_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


def get_settings() -> Settings:
    return Settings()
