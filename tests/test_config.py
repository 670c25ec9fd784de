import pytest

from app.core.config import BaseAppSettings, ProdSettings, TestSettings


def test_postgres_scheme_is_normalised():
    cfg = BaseAppSettings(DATABASE_URL="postgres://u:p@db:5432/donations")
    assert cfg.DATABASE_URL == "postgresql://u:p@db:5432/donations"


def test_prod_requires_store_and_twilio_settings(monkeypatch):
    for name in ("DATABASE_URL", "TWILIO_ACCOUNT_SID", "TWILIO_AUTH_TOKEN"):
        monkeypatch.delenv(name, raising=False)
    with pytest.raises(ValueError, match="TWILIO_ACCOUNT_SID"):
        ProdSettings(_env_file=None)


def test_prod_accepts_complete_settings():
    cfg = ProdSettings(
        _env_file=None,
        DATABASE_URL="postgresql://db/donations",
        TWILIO_ACCOUNT_SID="AC1",
        TWILIO_AUTH_TOKEN="tok",
    )
    assert cfg.LOG_FORMAT == "json"


def test_test_settings_disable_rate_limit():
    assert TestSettings(_env_file=None).RATE_LIMIT_ENABLED is False


def test_receipt_font_defaults_to_builtin_with_text_fallback():
    cfg = TestSettings(_env_file=None)
    assert cfg.RECEIPT_FONT_PATH is None
    assert cfg.CURRENCY_FALLBACK_TEXT == "Rs."
