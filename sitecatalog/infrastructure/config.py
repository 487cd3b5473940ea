"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_version: str = "0.1.0"
    debug: bool = False

    # Storage
    storage_backend: str = "memory"
    database_url: str = "sqlite:///./sitecatalog.db"

    # Tenancy
    default_site_id: int = 1

    # Query behaviour
    ignore_acl: bool = False
    ignore_multi_site: bool = False
    ignore_categories_without_existing_parent: bool = True

    # Cache
    cache_max_entries: int = 10000

    # Logging
    log_level: str = "INFO"

    class Config:
        """Pydantic configuration."""

        env_prefix = "SITECATALOG_"
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
