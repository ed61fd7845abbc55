"""Weather Groundhog — cached OpenWeatherMap client with background polling."""

from groundhog.client import WeatherClient
from groundhog.errors import (
    CityNotFoundError,
    InvalidStateError,
    WeatherClientError,
    WeatherError,
)
from groundhog.models.weather import CityWeather
from groundhog.services.freshness import ClientMode
from groundhog.services.registry import ApiKeyRegistry

__all__ = [
    "ApiKeyRegistry",
    "CityNotFoundError",
    "CityWeather",
    "ClientMode",
    "InvalidStateError",
    "WeatherClient",
    "WeatherClientError",
    "WeatherError",
]
