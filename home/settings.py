from typing import Literal, Optional

from pydantic import Field, RedisDsn
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DEBUG: bool = Field(default=False, alias="DEBUG")

    # Storage Configuration
    STORAGE_BACKEND: Literal["supabase", "local"] = Field(
        default="local", alias="STORAGE_BACKEND"
    )
    ALLOW_LOCAL_FALLBACK: bool = Field(
        default=True, alias="ALLOW_LOCAL_FALLBACK"
    )  # degrade to the local store when supabase is unreachable
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./home.db", alias="DATABASE_URL"
    )
    FALLBACK_DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./home-fallback.db",
        alias="FALLBACK_DATABASE_URL",
    )
    SUPABASE_URL: Optional[str] = Field(default=None, alias="SUPABASE_URL")
    SUPABASE_SERVICE_KEY: Optional[str] = Field(
        default=None, alias="SUPABASE_SERVICE_KEY"
    )
    SUPABASE_JWT_SECRET: str = Field(
        default="dev-secret-change-me", alias="SUPABASE_JWT_SECRET"
    )
    ACCESS_TOKEN_EXPIRE_HOURS: int = Field(
        default=24, alias="ACCESS_TOKEN_EXPIRE_HOURS"
    )

    # Change notifications
    REDIS_URL: Optional[RedisDsn] = Field(default=None, alias="REDIS_URL")
    CHANGES_CHANNEL: str = Field(default="home:changes", alias="CHANGES_CHANNEL")

    # Chat Assistant Configuration
    GOOGLE_API_KEY: Optional[str] = Field(default=None, alias="GOOGLE_API_KEY")
    CHAT_MODEL: str = Field(default="gemini-2.5-flash-lite", alias="CHAT_MODEL")
    CHAT_MAX_TOKENS: int = Field(default=500, alias="CHAT_MAX_TOKENS")
    CHAT_TEMPERATURE: float = Field(default=0.7, alias="CHAT_TEMPERATURE")

    # Ticket workflow
    AI_DIAGNOSIS_ENABLED: bool = Field(default=True, alias="AI_DIAGNOSIS_ENABLED")
    CONTRACTOR_FUZZY_RESOLUTION: bool = Field(
        default=True, alias="CONTRACTOR_FUZZY_RESOLUTION"
    )  # legacy name/email matching for users without a contractor_id

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
