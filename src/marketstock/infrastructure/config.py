"""Runtime configuration, read from ``MARKETSTOCK_*`` environment variables or ``.env``."""

from __future__ import annotations

from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

# Project root when installed in editable mode.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="MARKETSTOCK_", env_file=".env", extra="ignore"
    )

    # ── Storage ───────────────────────────────────────────────
    DATA_DIR: Path = _DEFAULT_DATA_DIR
    STORE_BACKEND: Literal["json", "sql"] = "json"
    DATABASE_URL: str = ""
    SQLITE_BUSY_TIMEOUT_SECONDS: int = 30

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"sqlite:///{self.DATA_DIR / 'marketstock.db'}"

    # ── Pricing / listings ────────────────────────────────────
    RETAIL_MARKUP: Decimal = Decimal("1.2")
    UPCOMING_COUNT: int = 6

    # ── Logging ───────────────────────────────────────────────
    LOG_LEVEL: str = "WARNING"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
