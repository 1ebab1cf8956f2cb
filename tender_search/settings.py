"""Application settings using Pydantic Settings."""

from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database (internal catalogue + saved searches)
    database_url: str = Field(
        default="sqlite:///tender_search.db",
        description="SQLAlchemy database URL",
    )
    db_pool_size: int = Field(default=5, ge=1, le=20, description="Connection pool size")
    db_pool_max_overflow: int = Field(
        default=10, ge=0, le=50, description="Max overflow connections"
    )

    # Source credentials
    boamp_api_key: str = Field(default="", description="BOAMP API key")
    ted_api_key: str = Field(default="", description="TED Europa API key")

    # Per-source timeout, derived from the source rate limit (requests/minute)
    source_timeout_base_seconds: float = Field(
        default=5.0, gt=0, description="Timeout for a source allowed 60 requests/minute"
    )
    source_timeout_min_seconds: float = Field(
        default=2.0, gt=0, description="Lower bound for a single source call"
    )
    source_timeout_max_seconds: float = Field(
        default=15.0, gt=0, description="Upper bound for a single source call"
    )
    search_deadline_seconds: Optional[float] = Field(
        default=None, gt=0, description="Overall deadline for one aggregated search"
    )

    # Result window
    default_page_size: int = Field(default=20, ge=1, le=100, description="Default page size")
    max_page_size: int = Field(default=100, ge=1, le=500, description="Maximum page size")
    max_results_per_source: int = Field(
        default=100, ge=1, le=1000, description="Maximum records requested from one source"
    )

    # Caller-side retry policy (1 = no retry)
    source_retry_attempts: int = Field(
        default=1, ge=1, le=5, description="Attempts per source call, including the first"
    )

    # Out-of-band switch to take sources offline without a code change
    disabled_sources: List[str] = Field(
        default_factory=list, description="Source ids forced to disabled"
    )

    http_user_agent: str = Field(
        default="tender-search/1.0 (+https://github.com/tender-search)",
        description="User-Agent sent to remote sources",
    )

    # Logging
    log_level: str = Field(
        default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_file: Optional[Path] = Field(
        default=None, description="Optional log file path"
    )


# Singleton settings instance
settings = Settings()
