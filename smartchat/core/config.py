"""
Application configuration via pydantic-settings.
All values are read from environment variables (or .env file).
"""
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # App
    PROJECT_NAME: str = "SmartChat API"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["*"]
    APP_BASE_URL: str = "http://localhost:3000"

    # Supabase: one URL, two key tiers
    SUPABASE_URL: str
    SUPABASE_ANON_KEY: str
    SUPABASE_SERVICE_ROLE_KEY: str | None = None

    # Dashboard gate
    DASHBOARD_PASSWORD: str | None = None

    # Stripe
    STRIPE_SECRET_KEY: str | None = None
    STRIPE_PRICE_STARTER: str = "price_1SbvEALNymQzQ2Suj9BpACKp"
    STRIPE_PRICE_PROFESSIONAL: str = "price_1SbvETLNymQzQ2SupQdP8n4g"

    @field_validator("SUPABASE_URL")
    @classmethod
    def supabase_url_is_http(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("SUPABASE_URL must be an http(s) URL")
        return v.rstrip("/")

    @field_validator("APP_BASE_URL")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


settings = Settings()
