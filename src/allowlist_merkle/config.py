"""
allowlist_merkle/config.py
Operator settings for the allowlist CLI.

Environment variables (optionally from `.env`):
    ALLOWLIST_LOG_LEVEL        (str, default "INFO")
    ALLOWLIST_OUTPUT_PATH      (path, default "proofs.json")
    ALLOWLIST_SORT_IDENTITIES  (bool, default True) - leaf ordering convention
"""
import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AllowlistSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="ALLOWLIST_",
        env_file=".env",
        extra="ignore",
    )

    log_level: str = Field(default="INFO", description="Root logging level.")
    output_path: Path = Field(
        default=Path("proofs.json"),
        description="Where `build` writes the proof document.",
    )
    sort_identities: bool = Field(
        default=True,
        description="Order leaves by ascending raw address bytes before building.",
    )

    @field_validator("log_level")
    @classmethod
    def _check_level(cls, v: str) -> str:
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level


@lru_cache(maxsize=1)
def get_settings() -> AllowlistSettings:
    return AllowlistSettings()
