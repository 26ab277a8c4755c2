"""Application configuration.

Loads settings from environment variables (prefix ``FACETSEARCH_``) with
sensible defaults.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_version: str = "0.1.0"
    debug: bool = False

    # Database
    database_url: str = "postgresql+asyncpg://facetsearch:facetsearch_dev_password@db:5432/facetsearch"

    # Search configuration: "database", "file" or "embedded"
    config_source: str = "embedded"
    config_path: str | None = None

    # Catalog: "database" or "generated"
    catalog_source: str = "generated"
    generator_seed: int = 42
    generator_products: int = 2000

    # Rebuild
    rebuild_workers: int = 1
    rebuild_chunk_size: int = 2000
    rebuild_on_startup: bool = True

    # Queries
    facet_histogram_buckets: int = 10
    default_page_size: int = 24
    max_page_size: int = 200

    # Logging
    log_level: str = "INFO"

    class Config:
        """Pydantic configuration."""

        env_prefix = "FACETSEARCH_"
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
