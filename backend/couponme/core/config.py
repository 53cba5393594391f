from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables or a .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore")

    app_name: str = "CouponMe API"
    app_version: str = "0.1.0"
    environment: str = "local"

    database_url: str = "sqlite+aiosqlite:///./couponme.db"
    secret_key: str = "dev-secret-key"
    jwt_algorithm: str = "HS256"
    access_token_exp_minutes: int = 30
    refresh_token_exp_days: int = 7

    stripe_secret_key: str | None = None
    stripe_webhook_secret: str | None = None
    membership_price_cents: int = 1000
    membership_currency: str = "eur"
    membership_duration_days: int = 365
    membership_product_name: str = "CouponMe Annual Membership"
    membership_product_description: str = "Unlock unlimited access to all coupon codes for one year"

    frontend_origin: str = "http://localhost:3000"
    default_locale: str = "en"

    media_root: str = "uploads"
    upload_max_bytes: int = 5 * 1024 * 1024

    cors_origins: list[str] = ["http://localhost:3000"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    log_json: bool = False

    sentry_dsn: str | None = None
    sentry_traces_sample_rate: float = 0.0

    auth_rate_limit_login: int = 10
    auth_rate_limit_register: int = 5


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
