from __future__ import annotations

import os
from dataclasses import dataclass
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    bot_token: str
    database_url: str | None
    database_require_ssl: bool
    db_path: str
    default_timezone: str
    webhook_url: str | None
    webhook_path: str
    webhook_secret_token: str | None
    port: int
    openai_api_key: str | None
    openai_model: str
    openai_timeout_s: float
    openai_max_retries: int
    log_level: str
    log_file: str | None


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "yes", "on"}


def load_settings() -> Settings:
    # Supports running with either `.env` present or purely env-driven.
    load_dotenv(override=False)

    bot_token = os.getenv("BOT_TOKEN", "").strip()
    if not bot_token:
        raise RuntimeError("BOT_TOKEN is required (set it in environment or .env).")

    default_timezone = os.getenv("DEFAULT_TIMEZONE", "UTC").strip() or "UTC"
    try:
        ZoneInfo(default_timezone)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise RuntimeError(f"DEFAULT_TIMEZONE is not a known IANA zone: {default_timezone!r}") from e

    return Settings(
        bot_token=bot_token,
        database_url=os.getenv("DATABASE_URL", "").strip() or None,
        database_require_ssl=_env_flag("DATABASE_REQUIRE_SSL"),
        db_path=os.getenv("DB_PATH", "aliya.db").strip() or "aliya.db",
        default_timezone=default_timezone,
        webhook_url=os.getenv("WEBHOOK_URL", "").strip() or None,
        webhook_path=os.getenv("WEBHOOK_PATH", "/telegram").strip() or "/telegram",
        webhook_secret_token=os.getenv("WEBHOOK_SECRET_TOKEN", "").strip() or None,
        port=int(os.getenv("PORT", "8080").strip() or "8080"),
        openai_api_key=os.getenv("OPENAI_API_KEY", "").strip() or None,
        openai_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini").strip() or "gpt-4o-mini",
        openai_timeout_s=float(os.getenv("OPENAI_TIMEOUT_S", "60").strip() or "60"),
        openai_max_retries=int(os.getenv("OPENAI_MAX_RETRIES", "2").strip() or "2"),
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
        log_file=os.getenv("LOG_FILE", "").strip() or None,
    )
