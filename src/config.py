"""
Family Chores: Centralized configuration.

Loads all settings from .env and validates required keys.
This module is the foundation for every other module in the project.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (two levels up from src/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Spreadsheet proxy (deployed Apps Script web app)
    SHEETS_PROXY_URL: str
    HTTP_TIMEOUT_SECONDS: float = 15.0

    # Local cache
    CACHE_DB_PATH: str = "data/family_chores.db"

    # Sync timing
    SYNC_DEBOUNCE_SECONDS: float = 2.0
    SYNC_STATUS_RESET_SECONDS: float = 3.0

    # Calendar comparisons ("same day", "same month"); empty → system local time
    TIMEZONE: str = ""

    # Members present before any remote data loads
    DEFAULT_MEMBERS: list[str] = ["Mom", "Dad"]

    @field_validator("DEFAULT_MEMBERS", mode="before")
    @classmethod
    def parse_members(cls, v: str | list[str]) -> list[str]:
        if isinstance(v, list):
            return v
        if isinstance(v, str) and v.strip():
            return [name.strip() for name in v.split(",") if name.strip()]
        return []

    @field_validator(
        "HTTP_TIMEOUT_SECONDS",
        "SYNC_DEBOUNCE_SECONDS",
        "SYNC_STATUS_RESET_SECONDS",
        mode="before",
    )
    @classmethod
    def parse_seconds(cls, v: str | float) -> float:
        return float(v)


def _load_settings() -> Settings:
    """Load settings from environment, validating required keys."""
    proxy_url = os.getenv("SHEETS_PROXY_URL", "")

    if not proxy_url or proxy_url.startswith("your-"):
        print("ERROR: SHEETS_PROXY_URL is missing or not set in .env", file=sys.stderr)
        sys.exit(1)

    return Settings(
        SHEETS_PROXY_URL=proxy_url,
        HTTP_TIMEOUT_SECONDS=os.getenv("HTTP_TIMEOUT_SECONDS", "15"),
        CACHE_DB_PATH=os.getenv("CACHE_DB_PATH", "data/family_chores.db"),
        SYNC_DEBOUNCE_SECONDS=os.getenv("SYNC_DEBOUNCE_SECONDS", "2.0"),
        SYNC_STATUS_RESET_SECONDS=os.getenv("SYNC_STATUS_RESET_SECONDS", "3.0"),
        TIMEZONE=os.getenv("TIMEZONE", ""),
        DEFAULT_MEMBERS=os.getenv("DEFAULT_MEMBERS", "Mom,Dad"),
    )


# Singleton, imported by all other modules as:
#   from src.config import settings
settings = _load_settings()
