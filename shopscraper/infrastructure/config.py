"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_version: str = "0.1.0"
    debug: bool = False
    cors_origins: list[str] = ["*"]

    # Database
    database_url: str = "postgresql+asyncpg://scraper:scraper_dev_password@db:5432/shopscraper"

    # Search index
    meilisearch_host: str = "http://meilisearch:7700"
    meilisearch_api_key: str = ""
    meilisearch_index: str = "products"
    search_sync_batch_size: int = 100
    # 0 disables the background sync loop in the API process
    search_sync_interval_seconds: float = 0.0

    # Billa REST catalog
    billa_api_base_url: str = "https://shop.billa.cz/api/product-discovery/categories"
    billa_store_id: str = "82-189"
    billa_page_size: int = 30

    # Foodora GraphQL catalog
    foodora_api_url: str = "https://cz.fd-api.com/api/v5/graphql"
    foodora_user_code: str = "cz6a15cx"
    foodora_global_entity_id: str = "DJ_CZ"
    foodora_locale: str = "cs_CZ"

    # Scraping
    http_timeout: float = 30.0
    request_delay_ms: int = 500
    store_delay_seconds: float = 5.0

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    class Config:
        """Pydantic configuration."""

        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
