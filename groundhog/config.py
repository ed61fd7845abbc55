"""SDK configuration via environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """SDK settings loaded from environment."""

    # OpenWeatherMap
    openweather_api_key: str = ""
    openweather_base_url: str = "https://api.openweathermap.org/data/2.5/"
    request_timeout: float = 15.0

    # Cache
    cache_ttl_seconds: int = 600
    cache_capacity: int = 10

    # Background refresh (polling mode)
    min_refresh_interval_seconds: float = 5.0
    client_mode: str = "on_demand"  # on_demand, polling

    model_config = {"env_file": ".env", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
