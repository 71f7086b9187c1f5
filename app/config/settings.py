from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Supabase
    supabase_url: str
    supabase_service_role_key: SecretStr  # privileged client; bypasses RLS
    supabase_anon_key: Optional[SecretStr] = None  # used for password sign-in

    # Auth backend: "supabase" (managed identities) or "password" (bcrypt + JWT)
    auth_backend: Literal["supabase", "password"] = "supabase"
    jwt_secret: Optional[SecretStr] = None
    jwt_algorithm: str = "HS256"
    jwt_expiry_minutes: int = 60
    refresh_token_expiry_days: int = 30

    # Tables
    profiles_table: str = "profiles"
    members_table: str = "members"
    identities_table: str = "identities"

    # Seconds before a single store call is abandoned
    store_timeout_seconds: float = 10.0

    # App
    app_name: str = "skillswap-backend"
    host: str = "0.0.0.0"
    port: int = 4000
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @model_validator(mode="after")
    def check_backend_credentials(self) -> "Settings":
        if self.auth_backend == "supabase" and not self.supabase_anon_key:
            raise ValueError("SUPABASE_ANON_KEY is required when AUTH_BACKEND=supabase")
        if self.auth_backend == "password" and not self.jwt_secret:
            raise ValueError("JWT_SECRET is required when AUTH_BACKEND=password")
        return self

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


@lru_cache
def get_settings() -> Settings:
    """Load settings once; raises if required environment variables are missing."""
    return Settings()
