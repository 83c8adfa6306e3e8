"""multinet configuration via environment / .env file."""

from __future__ import annotations

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Networks ---
    PRIMARY_NETWORK_ID: int = 1

    # --- Database ---
    DB_BASE_PREFIX: str = "wp_"

    # --- Logging ---
    LOG_LEVEL: str = "INFO"

    @field_validator("PRIMARY_NETWORK_ID")
    @classmethod
    def _positive_network_id(cls, v: int) -> int:
        if v < 1:
            raise ValueError("PRIMARY_NETWORK_ID must be a positive integer")
        return v

    @field_validator("DB_BASE_PREFIX")
    @classmethod
    def _normalize_prefix(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("DB_BASE_PREFIX cannot be empty")
        if not v.endswith("_"):
            return f"{v}_"
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return v


settings = Settings()
