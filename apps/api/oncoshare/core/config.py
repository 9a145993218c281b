"""Application configuration with environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    ENV: str = "dev"

    # App Version (format: a.bc.de - major.feature.patch)
    VERSION: str = "0.03.00"

    # Database (Postgres in production; SQLite works for local dev)
    DATABASE_URL: str = "sqlite:///./oncoshare.db"

    # Logging
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ORIGINS: str = "http://localhost:5173"

    # Case listing pagination (offset/limit)
    CASE_PAGE_SIZE: int = 50
    CASE_MAX_PAGE_SIZE: int = 500

    # Feed pagination (cursor)
    FEED_PAGE_SIZE: int = 20
    FEED_MAX_PAGE_SIZE: int = 100

    # Optional zone lookup table probed at runtime
    ZONE_TABLE_NAME: str = "ng_states"

    # Deadline applied to every bulk query (seconds, 0 disables)
    QUERY_TIMEOUT_SECONDS: float = 15.0

    # File storage (key -> URL)
    STORAGE_BACKEND: str = "local"  # local | s3
    S3_BUCKET: str = "oncoshare-case-files"
    S3_PUBLIC_BASE_URL: str = ""
    S3_URL_STYLE: str = "path"  # path | virtual
    LOCAL_MEDIA_URL_PREFIX: str = "/media"

    # Stats
    TOP_TUMOUR_TYPES_LIMIT: int = 5
    REMISSION_OUTCOME: str = "REMISSION"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS into a list."""
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def query_timeout(self) -> float | None:
        """Deadline for bulk queries, or None when disabled."""
        if self.QUERY_TIMEOUT_SECONDS <= 0:
            return None
        return self.QUERY_TIMEOUT_SECONDS


settings = Settings()
