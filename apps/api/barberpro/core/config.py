import re
from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    # Hosted backend (the front-end build uses the VITE_ prefixed names)
    supabase_url: str = Field(
        validation_alias=AliasChoices("SUPABASE_URL", "VITE_SUPABASE_URL"),
    )
    supabase_anon_key: str = Field(
        default="",
        validation_alias=AliasChoices("SUPABASE_ANON_KEY", "VITE_SUPABASE_ANON_KEY"),
    )
    supabase_service_role_key: str = ""
    supabase_jwt_secret: str = ""

    # Direct Postgres connection to the same project
    database_url: str

    # Tooling
    migration_sql_path: str | None = None
    migration_pause_seconds: float = 0.1
    seed_pause_seconds: float = 0.3
    auth_retry_delay_seconds: float = 1.0
    fix_settle_seconds: float = 2.0
    auth_page_size: int = 50
    http_timeout_seconds: float = 15.0

    # API
    session_cookie_name: str = "sb-access-token"
    cors_origins: str = ""
    log_level: str = "INFO"

    @property
    def auth_url(self) -> str:
        return f"{self.supabase_url.rstrip('/')}/auth/v1"

    @property
    def masked_database_url(self) -> str:
        return re.sub(r":([^:@/]+)@", ":***@", self.database_url)

    @property
    def allowed_origins_list(self) -> list[str]:
        origins = [o.strip() for o in self.cors_origins.split(",") if o.strip()]
        # Vite dev server
        return origins or ["http://localhost:5173", "http://127.0.0.1:5173"]


@lru_cache
def get_settings() -> Settings:
    return Settings()
