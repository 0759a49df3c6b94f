"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (and .env file).

The credential lifetimes below are part of the service contract: a code lives
five minutes, a reset token fifteen, and a client may request twenty codes per
fifteen-minute window.
"""

from __future__ import annotations

from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RedisSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Optional; without Redis the process falls back to the in-memory store
    redis_uri: Optional[str] = None
    redis_key_prefix: str = "pwreset"


class VerificationCodeSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    code_ttl_seconds: int = 300
    # Expired codes are kept this long so a late verify reports "expired"
    expired_code_retention_seconds: int = 60


class ResetTokenSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    reset_token_ttl_seconds: int = 900
    jwt_issuer: str = "password-reset"
    jwt_audience: str = "password-reset.consumer"

    # RS256 keys (preferred)
    jwt_private_key: str = ""
    jwt_public_key: str = ""

    # HS256 fallback (used when RS256 keys are absent)
    jwt_secret: str = ""

    @property
    def use_rs256(self) -> bool:
        return bool(self.jwt_private_key and self.jwt_public_key)


class RateLimitSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    code_request_limit: int = 20
    code_request_window_seconds: int = 900


class SweepSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    sweep_interval_seconds: float = 300.0


class EmailSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    zepto_api_url: str = "https://api.zeptomail.com/v1.1/email"
    zepto_api_token: str = ""
    zepto_from_email: str = "noreply@example.com"
    zepto_from_name: str = "Password Reset"


class CollaboratorSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    identity_resolver_url: str = ""
    token_sink_url: str = ""
    collaborator_api_key: str = ""
    collaborator_timeout_seconds: float = 5.0


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

    # Core
    env: str = "development"
    app_name: str = "password-reset"

    cors_origins: list[str] = ["*"]

    # OpenAPI docs URL (None disables the docs UI in production)
    docs_url: Optional[str] = "/docs"

    # Sub-configs (composed via model_validator below)
    redis: Optional[RedisSettings] = None
    codes: Optional[VerificationCodeSettings] = None
    tokens: Optional[ResetTokenSettings] = None
    rate_limit: Optional[RateLimitSettings] = None
    sweep: Optional[SweepSettings] = None
    email: Optional[EmailSettings] = None
    collaborators: Optional[CollaboratorSettings] = None
    logging: Optional[LoggingSettings] = None
    sentry: Optional[SentrySettings] = None

    @model_validator(mode="after")
    def _populate_sub_configs(self) -> "AppSettings":
        # Populate sub-configs from the same env/dotenv source
        if self.redis is None:
            self.redis = RedisSettings()
        if self.codes is None:
            self.codes = VerificationCodeSettings()
        if self.tokens is None:
            self.tokens = ResetTokenSettings()
        if self.rate_limit is None:
            self.rate_limit = RateLimitSettings()
        if self.sweep is None:
            self.sweep = SweepSettings()
        if self.email is None:
            self.email = EmailSettings()
        if self.collaborators is None:
            self.collaborators = CollaboratorSettings()
        if self.logging is None:
            self.logging = LoggingSettings()
        if self.sentry is None:
            self.sentry = SentrySettings()

        return self

    @property
    def is_production(self) -> bool:
        return self.env == "production"
