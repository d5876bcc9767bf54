from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""  # anon key, RLS applies
    supabase_service_role_key: Optional[str] = None  # Required for invitations, storage and auth admin calls
    database_url: Optional[str] = None  # Only read by scripts/check_env.py

    # App
    app_name: str = "cando-business"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"
    frontend_url: str = "http://localhost:3000"

    # Paging
    feed_page_size: int = 20
    bookmarks_page_size: int = 10
    notifications_page_size: int = 10
    directory_page_size: int = 12
    rfqs_page_size: int = 10
    flags_page_size: int = 10

    # In-process throttling (see core/rate_limiter.py)
    company_rate_limit: int = 100
    company_rate_window_ms: int = 60000
    message_rate_limit: int = 1
    message_rate_window_ms: int = 500
    message_send_retries: int = 3

    # Admin bootstrap (scripts/setup_admin.py)
    admin_email: Optional[str] = None
    admin_password: Optional[str] = None
    admin_name: str = "Admin User"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",
        extra="ignore"
    )


settings = Settings()
