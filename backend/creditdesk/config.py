"""
CreditDesk Configuration Module
Loads settings from environment variables with sensible defaults.
"""

from functools import lru_cache
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "CreditDesk"
    debug: bool = False

    # Authentication
    secret_key: str = Field(..., min_length=32)  # Required, no default
    access_token_expire_minutes: int = 60 * 24  # 1 day
    jwt_algorithm: str = "HS256"
    password_min_length: int = 8

    # Cookie Security
    cookie_secure: bool = False  # Set to True for HTTPS (production)
    cookie_max_age: int = 60 * 60 * 24  # 1 day
    cookie_samesite: str = "lax"  # lax, strict, or none

    # Rate Limiting
    rate_limit_enabled: bool = True
    rate_limit_storage_uri: str = "memory://"  # e.g. redis://redis:6379/0
    rate_limit_login: str = "5/15minutes"
    rate_limit_register: str = "10/hour"
    rate_limit_search_refresh: str = "1/30seconds"

    # CSRF Protection
    csrf_enabled: bool = True
    csrf_cookie_name: str = "csrf_token"
    csrf_header_name: str = "X-CSRF-Token"
    csrf_cookie_secure: bool = False  # Set to True in production with HTTPS
    csrf_cookie_samesite: str = "lax"
    csrf_cookie_max_age: int = 60 * 60 * 24

    # Database
    database_url: str = Field(..., alias="DATABASE_URL")

    # Logging
    log_dir: str = "/var/log/creditdesk"
    log_level: str = "INFO"

    # Credits
    default_search_cost: int = 10
    default_credit_limit: int = 100

    # Search provider webhook
    search_provider_base_url: str = "https://autowebhook.hooks.digital/webhook"
    search_provider_search_id: str = ""
    search_provider_status_id: str = ""
    search_provider_download_id: str = ""
    search_provider_token: str = ""
    search_provider_timeout: float = 30.0

    # API Settings
    api_prefix: str = "/api"

    @field_validator('secret_key')
    @classmethod
    def validate_secret_key(cls, v: str) -> str:
        """Validate that the secret key is secure."""
        if not v or len(v) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters long")

        insecure_values = [
            "change-me-in-production",
            "secret",
            "password",
            "changeme",
        ]
        if any(bad in v.lower() for bad in insecure_values):
            raise ValueError(
                "SECRET_KEY appears to be insecure. Generate a secure key with: "
                "python -c 'import secrets; print(secrets.token_hex(32))'"
            )

        return v

    @property
    def search_url(self) -> str:
        return f"{self.search_provider_base_url}/{self.search_provider_search_id}"

    @property
    def status_url(self) -> str:
        # The provider reuses the search webhook for status checks unless told otherwise
        status_id = self.search_provider_status_id or self.search_provider_search_id
        return f"{self.search_provider_base_url}/{status_id}"

    @property
    def download_url(self) -> str:
        return f"{self.search_provider_base_url}/{self.search_provider_download_id}"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"
        populate_by_name = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience alias
settings = get_settings()
