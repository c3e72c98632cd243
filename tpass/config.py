"""Typed settings configuration - single source of truth."""

from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict


class CalendarSourceConfig(BaseModel):
    """One calendar provider; `{year}` in the URL is replaced per fetch."""

    name: str
    url_template: str

    def url_for(self, year: int) -> str:
        return self.url_template.replace("{year}", str(year))


DEFAULT_CALENDAR_SOURCES = [
    CalendarSourceConfig(
        name="data.gov.tw - 政府行政機關辦公日曆表",
        url_template="https://cdn.jsdelivr.net/gh/ruyut/TaiwanCalendar/data/{year}.json",
    ),
    CalendarSourceConfig(
        name="新北市資料開放平臺",
        url_template=(
            "https://data.ntpc.gov.tw/api/datasets/"
            "308DCD75-6434-45BC-A95F-584DA4FED251/json"
        ),
    ),
]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Calendar cache
    calendar_cache_path: Path = Path("data/calendar-cache.json")
    calendar_cache_max_age_days: int = 30

    # Calendar providers, in priority order
    calendar_sources: list[CalendarSourceConfig] = DEFAULT_CALENDAR_SOURCES
    calendar_fetch_timeout_s: float = 10.0
    calendar_user_agent: str = "TPASS-Calculator/1.0"

    # Fare defaults
    default_one_way_fare: int = 40
    default_trips_per_day: int = 2

    # Monthly pass
    pass_price: int = 1200
    pass_validity_days: int = 30

    # Request validation bounds
    min_fare: int = 1
    max_fare: int = 1000
    min_trips_per_day: int = 1
    max_trips_per_day: int = 10

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
