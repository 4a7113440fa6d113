from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Loading priority (highest to lowest):
    1. Environment variables
    2. .env file
    3. Default values below
    """

    # Environment
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Application
    app_name: str = "Hash Link Shortener"
    app_version: str = "1.0.0"

    # Token derivation
    character_slice: int = 4  # Hex characters taken from each digest
    dev_base_url: str = "http://localhost:8787"  # Short URL host in development

    # Mapping store settings
    store_backend: str = "memory"  # Options: "memory", "redis", "sql"
    store_key_prefix: str = "link:"
    list_page_size: int = 1000
    redis_url: str = "redis://localhost:6379/0"
    database_url: str = "sqlite:///./hashlink.db"

    # Rate limiting (per token, on lookups)
    rate_limit_backend: str = "memory"  # Options: "memory", "redis", "null"
    rate_limit_requests: int = 60
    rate_limit_window_seconds: int = 60

    # Queue settings (usage events)
    queue_backend: str = "redis_streams"  # Options: "redis_streams", "memory"
    queue_name: str = "usage_events"
    queue_consumer_group: str = "usage_workers"
    queue_batch_size: int = 100
    queue_worker_interval: int = 5
    queue_max_length: int = 10000  # Cap for the in-memory queue; oldest events are dropped

    # Hit storage settings (analytics database)
    hit_storage_sqlite_path: str = "analytics.db"

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


class ShortenerConfig(BaseModel):
    """
    Configuration handed to URLService at construction time.

    Fixed for the lifetime of the process; the service never reads
    environment variables or the global settings object itself.
    """

    slice_len: int = 4
    environment: str = "development"
    dev_base_url: str = "http://localhost:8787"

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_settings(cls, source: Settings) -> "ShortenerConfig":
        return cls(
            slice_len=source.character_slice,
            environment=source.environment,
            dev_base_url=source.dev_base_url,
        )

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


# Create settings instance
settings = Settings()
