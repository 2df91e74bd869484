from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv
from typing import Optional

load_dotenv()


class Settings(BaseSettings):
    # Application settings
    app_name: str = "devfolio"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"

    # Hosted backend (PostgREST-compatible REST interface)
    backend_url: str = "http://localhost:54321"
    backend_anon_key: str = ""
    backend_service_key: Optional[str] = None
    backend_timeout_seconds: float = 10.0

    # Visitor anonymisation
    ip_lookup_url: str = "https://api.ipify.org?format=json"
    ip_lookup_timeout_seconds: float = 3.0
    ip_hash_salt: str = "blog-analytics-salt"

    # View tracking
    view_gate_seconds: int = 30
    max_field_length: int = 500
    top_referrers_limit: int = 10
    analytics_default_days: int = 30

    # Use X-Forwarded-For for the visitor address (only behind a trusted proxy)
    trust_forwarded_for: bool = False

    # Client state storage; memory stores are used when redis_url is unset
    redis_url: Optional[str] = None
    tab_session_ttl_seconds: int = 60 * 60 * 24
    browser_cookie_name: str = "folio_browser"
    tab_cookie_name: str = "folio_tab"
    browser_cookie_max_age: int = 60 * 60 * 24 * 365

    # Public host of the site; links to it in posts open in the same tab
    site_host: Optional[str] = None

    # CORS settings
    allowed_origins: list[str] = ["http://localhost:5173", "http://localhost:8000"]

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


settings = Settings()
