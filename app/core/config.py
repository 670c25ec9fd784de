from __future__ import annotations

import os
from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseAppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "Donation Receipts"
    ENV: str = "dev"
    DATABASE_URL: str | None = None
    PUBLIC_BASE_URL: str = "http://localhost:8000"

    # Receipt artifacts
    RECEIPTS_DIR: str = "receipts"
    RECEIPT_CACHE_MAX_AGE: int = 3600
    STATIC_RECEIPTS_MOUNT: str = "/receipts"  # empty string disables the static mount

    # Receipt rendering
    RECEIPT_TITLE: str = "Payment Receipt"
    CURRENCY_SYMBOL: str = "₹"
    RECEIPT_TIMEZONE: str = "UTC"
    RECEIPT_DATETIME_FORMAT: str = "%m/%d/%Y, %I:%M:%S %p"
    RECEIPT_RECIPIENT_DEFAULT: str = "N/A"
    # TrueType font covering the currency sign and donor scripts (e.g. NotoSans, DejaVuSans)
    RECEIPT_FONT_PATH: str | None = None
    # Printed in place of CURRENCY_SYMBOL when only the built-in fonts are available
    CURRENCY_FALLBACK_TEXT: str = "Rs."

    # Twilio WhatsApp
    TWILIO_ACCOUNT_SID: str | None = None
    TWILIO_AUTH_TOKEN: str | None = None
    TWILIO_WHATSAPP_FROM: str = "whatsapp:+14155238886"
    TWILIO_API_BASE: str = "https://api.twilio.com/2010-04-01"
    TWILIO_TIMEOUT_SECONDS: float = 10.0
    FALLBACK_RECIPIENT: str = "whatsapp:+1234567890"

    # Webhook rate limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    WEBHOOK_RATE_LIMIT: str = "60/minute"

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "plain"
    SENTRY_DSN: str | None = None

    @model_validator(mode="after")
    def _validate_required_fields(self) -> BaseAppSettings:
        # Convert Heroku/Render style postgres:// URL to postgresql://
        if self.DATABASE_URL and self.DATABASE_URL.startswith("postgres://"):
            self.DATABASE_URL = self.DATABASE_URL.replace("postgres://", "postgresql://", 1)

        required_in_prod = (
            "DATABASE_URL",
            "PUBLIC_BASE_URL",
            "TWILIO_ACCOUNT_SID",
            "TWILIO_AUTH_TOKEN",
        )
        if self.ENV.lower() == "prod":
            missing = [name for name in required_in_prod if not getattr(self, name)]
            if missing:
                raise ValueError(f"Missing required production settings: {', '.join(missing)}")
        return self


class DevSettings(BaseAppSettings):
    ENV: str = "dev"
    DATABASE_URL: str = "sqlite:///./dev.db"


class TestSettings(BaseAppSettings):
    ENV: str = "test"
    DATABASE_URL: str = "sqlite:///:memory:"
    RATE_LIMIT_ENABLED: bool = False


class ProdSettings(BaseAppSettings):
    ENV: str = "prod"
    LOG_FORMAT: str = "json"


_ENV_TO_SETTINGS: dict[str, type[BaseAppSettings]] = {
    "dev": DevSettings,
    "development": DevSettings,
    "test": TestSettings,
    "testing": TestSettings,
    "prod": ProdSettings,
    "production": ProdSettings,
}


@lru_cache
def get_settings() -> BaseAppSettings:
    env_name = os.getenv("APP_ENV") or os.getenv("ENV") or "dev"
    env = env_name.lower()
    settings_cls = _ENV_TO_SETTINGS.get(env, DevSettings)
    return settings_cls()


settings = get_settings()
