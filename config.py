"""
Configuration for the reCAPTCHA gate.

RecaptchaOptions is the immutable per-gate configuration, validated once when
a gate is built. AppSettings is the process configuration loaded from
environment variables (and .env file) via pydantic-settings; it knows how to
produce RecaptchaOptions for the app-wide gate.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

RECAPTCHA_VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"
DEFAULT_FIELD = "g-recaptcha-response"

# Passing this as the secret swaps in Google's public test secret, which
# makes every verification succeed.
TEST_SECRET_SENTINEL = "test_secret"
RECAPTCHA_TEST_SECRET = "6LeIxAcTAAAAAGG-vFI1TnRWxMZNFuojJ4WifJWe"

DEFAULT_TIMEOUT_SECONDS = 5.0


class RecaptchaOptions(BaseModel):
    """Gate options. Frozen after validation."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    field: str = Field(default=DEFAULT_FIELD, min_length=1)
    secret: str = Field(min_length=1)
    timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)

    @model_validator(mode="before")
    @classmethod
    def _substitute_test_secret(cls, data):
        if isinstance(data, dict) and data.get("secret") == TEST_SECRET_SENTINEL:
            data = {**data, "secret": RECAPTCHA_TEST_SECRET}
        return data

    @property
    def verify_url(self) -> str:
        return RECAPTCHA_VERIFY_URL

    @property
    def is_test_mode(self) -> bool:
        return self.secret == RECAPTCHA_TEST_SECRET


class RecaptchaSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    recaptcha_secret: str = ""
    recaptcha_field: str = DEFAULT_FIELD
    recaptcha_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    def to_options(self) -> RecaptchaOptions:
        return RecaptchaOptions(
            field=self.recaptcha_field,
            secret=self.recaptcha_secret,
            timeout_seconds=self.recaptcha_timeout_seconds,
        )


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    log_format: str = "console"  # "json" in production


class SentrySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    sentry_dsn: str = ""
    sentry_send_pii: bool = False
    sentry_traces_sample_rate: float = 0.1


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    env: str = "development"
    app_name: str = "recaptcha-gate"

    cors_origins: list[str] = ["*"]

    # OpenAPI docs URL (None disables the docs UI in production)
    docs_url: Optional[str] = "/docs"

    # Sub-configs (composed via model_validator below)
    recaptcha: Optional[RecaptchaSettings] = None
    logging: Optional[LoggingSettings] = None
    sentry: Optional[SentrySettings] = None

    @model_validator(mode="after")
    def _populate_sub_configs(self) -> "AppSettings":
        if self.recaptcha is None:
            self.recaptcha = RecaptchaSettings()
        if self.logging is None:
            self.logging = LoggingSettings()
        if self.sentry is None:
            self.sentry = SentrySettings()
        return self

    @property
    def is_production(self) -> bool:
        return self.env == "production"
