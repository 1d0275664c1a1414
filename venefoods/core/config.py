# venefoods/core/config.py
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - SUPABASE_URL
      - SUPABASE_KEY (anon key)
      - DATABASE_URL (Supabase Postgres connection string)
      - SUPABASE_JWT_SECRET (JWT signing secret from Supabase project settings)

    Optional:
      - SUPABASE_SERVICE_ROLE_KEY (only used for Storage uploads)
      - ADMIN_EMAILS (JSON list; empty => any signed-in operator is admin)
    """

    PROJECT_NAME: str = "Venefoods Storefront API"
    API_V1_STR: str = "/api/v1"
    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
    ]

    # Supabase / DB config
    SUPABASE_URL: str
    SUPABASE_KEY: str
    DATABASE_URL: str

    # JWT verification (backend-side)
    SUPABASE_JWT_SECRET: str
    SUPABASE_JWT_ALG: str = "HS256"

    # Service role key bypasses RLS (backend only)
    SUPABASE_SERVICE_ROLE_KEY: str | None = None
    STORAGE_BUCKET: str = "images"

    ADMIN_EMAILS: list[str] = []

    # Cart snapshots are stored under "<CART_STORAGE_KEY>:<cart id>"
    CART_STORAGE_KEY: str = "venefoods_cart"

    # Order numbering: <PREFIX>-<YYMMDD>-<seq:04d>
    ORDER_ID_PREFIX: str = "VF"
    ORDER_COUNTER_ID: str = "orders"
    ORDER_SUBMIT_ATTEMPTS: int = 3
    STORE_TIMEZONE: str = "America/Sao_Paulo"

    # "(54) 99329-4396" style numbers; landlines are 14 chars formatted
    MIN_PHONE_LENGTH: int = 14

    # Fallback when the `whatsapp_number` site setting is empty
    WHATSAPP_NUMBER: str = "5554993294396"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
