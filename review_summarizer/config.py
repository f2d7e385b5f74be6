from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Review Summarizer"
    app_env: str = "dev"
    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"

    scraper_headless: bool = True
    scraper_slow_mo_ms: int = 0
    scraper_maps_url: str = "https://www.google.com/maps"
    scraper_locale: str = "en-US"
    scraper_user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/124.0.0.0 Safari/537.36"
    )
    scraper_latitude: float = 27.4989
    scraper_longitude: float = -82.5748
    scraper_extra_chromium_args: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: [
            "--no-sandbox",
            "--disable-dev-shm-usage",
            "--disable-gpu",
        ]
    )
    scraper_step_timeout_ms: int = 8000
    scraper_probe_timeout_ms: int = 6000
    scraper_max_reviews: int = 80
    scraper_time_budget_ms: int = 90000
    scraper_scroll_pause_ms: int = 900
    scraper_stagnation_threshold: int = 6
    scraper_min_review_length: int = 6
    scraper_max_expand_clicks: int = 8

    http_timeout_s: float = 20.0
    http_user_agent: str = "Mozilla/5.0"
    listing_min_text_length: int = 31

    cache_ttl_seconds: int = 6 * 60 * 60
    summary_max_items: int = 300

    cors_origins: Annotated[list[str], NoDecode] = Field(default_factory=lambda: ["*"])

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, value: object) -> object:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("scraper_extra_chromium_args", mode="before")
    @classmethod
    def parse_scraper_extra_chromium_args(cls, value: object) -> object:
        if isinstance(value, str):
            return [arg.strip() for arg in value.split(",") if arg.strip()]
        return value

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
