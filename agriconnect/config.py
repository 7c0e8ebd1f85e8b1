"""Configuration settings for AgriConnect backend."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Supabase
    supabase_url: str | None = None
    supabase_anon_key: str | None = None  # Client/public access, used for auth calls
    supabase_secret_key: str | None = None  # Backend table access

    # JWT
    jwt_secret_key: str  # Required - no default for security
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60 * 24 * 7  # 1 week
    cookie_secure: bool = True

    # App
    debug: bool = False
    log_level: str = "INFO"
    rate_limit_enabled: bool = True
    trusted_proxy_cidrs: str = ""
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
    ]

    # Reverse geocoding
    opencage_api_key: str | None = None
    geocode_timeout: float = 10.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def supabase_configured(self) -> bool:
        """Supabase is usable only when both URL and anon key are present."""
        return bool(self.supabase_url and self.supabase_anon_key)

    @property
    def supabase_table_key(self) -> str | None:
        return self.supabase_secret_key or self.supabase_anon_key


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
