"""Application settings with environment variable support."""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path


# Compute package dir at module level
_PACKAGE_DIR = Path(__file__).parent.resolve()


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="DI_",  # DI_FETCH_MAX_RETRIES, DI_LOG_LEVEL, etc.
    )

    # Registry
    feeds_path: Path = _PACKAGE_DIR / "feeds.json"

    # Ingestion
    fetch_timeout_seconds: int = 30
    fetch_max_retries: int = 3
    retry_base_delay_seconds: float = 1.0
    retry_max_delay_seconds: float = 10.0
    max_concurrent_fetches: int = 5
    max_items_per_feed: int = 10
    user_agent: str = "DiabetesIntelBot/1.0"

    # Scheduling
    auto_refresh_interval_minutes: int = 60
    auto_refresh_on_start: bool = False  # API server starts the loop in its lifespan

    # Aggregation
    api_cache_ttl_seconds: int = 300
    aggregate_max_items: int = 100
    hacker_news_story_limit: int = 10
    github_query: str = "diabetes type 1"
    pubmed_term: str = "type 1 diabetes"
    pubmed_max_results: int = 10
    clinical_trials_term: str = "type 1 diabetes"
    reddit_subreddit: str = "Type1Diabetes"
    fda_device_search: str = "device.generic_name:insulin"
    fda_drug_search: str = "indications_and_usage:diabetes"

    # Quality and health
    quality_threshold: float = 70.0
    health_error_rate_threshold: float = 20.0

    # Service
    log_level: str = "INFO"
    api_host: str = "0.0.0.0"
    api_port: int = 8000


settings = Settings()
