"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API
    api_version: str = "0.1.0"
    debug: bool = False

    # Stores backend
    stores_api_url: str = "http://stores-api:8080"
    stores_api_key: str = "dev-stores-key-change-in-production"
    stores_api_timeout: float = 10.0

    # Paging
    default_page_size: int = 100
    variant_batch_size: int = 100

    # Upper price bounds at or above this value are treated as "no ceiling"
    # and not sent to the backend. None sends every positive upper bound.
    price_ceiling_sentinel: float | None = 999999

    # Facet aggregation cardinality limits
    option_names_limit: int = 20
    choice_names_limit: int = 50
    inventory_status_limit: int = 10

    # Logging
    log_level: str = "INFO"


settings = Settings()
