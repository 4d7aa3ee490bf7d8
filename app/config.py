# app/config.py
from typing import Literal, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # App
    APP_ENV: Literal["dev", "prod", "staging"] = "dev"

    # Bot identity (shown by /about)
    BOT_NAME: str = "Password Generator Bot"
    BOT_VERSION: str = "1.0.0"
    BOT_AUTHOR: str = "Hirbod Behnam"
    BOT_SOURCE_URL: str = "https://github.com/HirbodBehnam/Password-Generator-Bot-Rust"

    # Telegram
    TELEGRAM_BOT_TOKEN: Optional[str] = None
    TELEGRAM_WEBHOOK_SECRET: Optional[str] = None
    WEBHOOK_URL: Optional[str] = None  # public URL of /telegram/webhook

    # Logging
    LOG_REDACTION_KEY: Optional[str] = None  # HMAC key for user ids in logs; random per process if unset

    # Sessions
    SESSION_TTL_SECONDS: int = Field(300, gt=0)  # absolute deadline, never refreshed
    SWEEP_INTERVAL_SECONDS: int = Field(600, gt=0)

    # Passwords
    QUICK_GENERATE_LENGTH: int = Field(16, ge=1, le=255)

    # read .env and ignore any extra keys so this doesn't break again
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

settings = Settings()
