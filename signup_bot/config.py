from __future__ import annotations

"""Configuration module for the sign-up bot."""
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    bot_token: str = Field(..., validation_alias="BOT_TOKEN")
    database_path: Path = Field(default=Path("./data/signup.sqlite3"), validation_alias="DB_PATH")
    locale: Literal["en", "ru"] = Field(default="en", validation_alias="LOCALE")
    users_collection: str = Field(default="users", validation_alias="USERS_COLLECTION")
    preview_width: int = Field(default=150, gt=0, validation_alias="PREVIEW_WIDTH")
    jpeg_quality: int = Field(default=50, ge=1, le=95, validation_alias="JPEG_QUALITY")
    max_photo_bytes: int = Field(default=8 * 1024 * 1024, gt=0, validation_alias="MAX_PHOTO_BYTES")


@lru_cache()
def load_settings() -> Settings:
    return Settings()
