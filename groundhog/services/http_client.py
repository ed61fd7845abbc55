"""OpenWeatherMap HTTP access — the fetch boundary used by the client."""

import logging
from typing import Protocol

import httpx
from pydantic import ValidationError

from groundhog.config import get_settings
from groundhog.errors import CityNotFoundError, WeatherClientError
from groundhog.models.weather import ApiError, CityWeather, WeatherModel

logger = logging.getLogger(__name__)


class WeatherFetcher(Protocol):
    """Anything that can look up the current weather for a city.

    ``fetch`` returns the parsed weather, or None if the response could not
    be turned into a ``CityWeather``. It raises ``CityNotFoundError`` when the
    upstream confirms the city does not exist, and ``WeatherClientError`` or
    ``httpx.HTTPError`` for everything else.
    """

    def fetch(self, api_key: str, city: str) -> CityWeather | None: ...

    def close(self) -> None: ...


class OpenWeatherFetcher:
    """Fetches ``/weather?q=<city>`` with a shared httpx.Client."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        settings = get_settings()
        self._client = client or httpx.Client(
            base_url=base_url or settings.openweather_base_url,
            timeout=timeout if timeout is not None else settings.request_timeout,
        )

    def fetch(self, api_key: str, city: str) -> CityWeather | None:
        resp = self._client.get("weather", params={"appid": api_key, "q": city})
        if resp.status_code != 200:
            error = _parse_error(resp)
            logger.warning(
                "OpenWeather API %d for %s%s",
                resp.status_code,
                city,
                f" ({error.message})" if error else "",
            )
            if error is None:
                raise WeatherClientError(
                    "API error: Unsuccessful response without error body", city=city
                )
            if error.cod == 404:
                raise CityNotFoundError(city)
            raise WeatherClientError(f"API error: {error.message}", city=city)
        return parse_weather(resp)

    def close(self) -> None:
        self._client.close()


def parse_weather(resp: httpx.Response) -> CityWeather | None:
    """Convert a successful response body to ``CityWeather``.

    Returns None on malformed JSON or a schema mismatch so the caller can
    report it as a protocol failure.
    """
    try:
        return WeatherModel.model_validate(resp.json()).to_city_weather()
    except (ValueError, ValidationError):
        logger.debug("Could not deserialize weather body: %.200s", resp.text)
        return None


def _parse_error(resp: httpx.Response) -> ApiError | None:
    if not resp.content:
        return None
    try:
        return ApiError.model_validate(resp.json())
    except (ValueError, ValidationError):
        return None
