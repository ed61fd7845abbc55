"""Shared fixtures for groundhog tests."""

import json
import time

import pytest

from groundhog.models.weather import CityWeather
from groundhog.services.registry import ApiKeyRegistry

ZOCCA_JSON = """
{
  "weather": {"main": "Clouds", "description": "scattered clouds"},
  "temperature": {"temp": 269.6, "feels_like": 267.57},
  "visibility": 10000,
  "wind": {"speed": 1.38},
  "datetime": 1675744800,
  "sys": {"sunrise": 1675751262, "sunset": 1675787560},
  "timezone": 3600,
  "name": "Zocca"
}
"""

# Raw OpenWeatherMap /weather response for the same observation
ZOCCA_API_RESPONSE = {
    "coord": {"lon": 10.99, "lat": 44.34},
    "weather": [
        {"id": 802, "main": "Clouds", "description": "scattered clouds", "icon": "03n"}
    ],
    "base": "stations",
    "main": {
        "temp": 269.6,
        "feels_like": 267.57,
        "temp_min": 268.6,
        "temp_max": 271.2,
        "pressure": 1021,
        "humidity": 60,
    },
    "visibility": 10000,
    "wind": {"speed": 1.38, "deg": 300},
    "clouds": {"all": 40},
    "dt": 1675744800,
    "sys": {"type": 2, "id": 2004688, "country": "IT", "sunrise": 1675751262, "sunset": 1675787560},
    "timezone": 3600,
    "id": 3163858,
    "name": "Zocca",
    "cod": 200,
}


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Reset module-level singletons between tests."""
    yield

    # 1. Settings LRU cache
    from groundhog.config import get_settings

    get_settings.cache_clear()

    # 2. Process-wide API key registry
    from groundhog.services.registry import default_registry

    default_registry.clear()


@pytest.fixture
def zocca() -> CityWeather:
    return CityWeather.model_validate(json.loads(ZOCCA_JSON))


def make_weather(name: str = "Zocca", datetime: int | None = None, temp: float = 269.6) -> CityWeather:
    """Build a CityWeather with the Zocca payload, overriding name/time/temp."""
    data = json.loads(ZOCCA_JSON)
    data["name"] = name
    data["temperature"]["temp"] = temp
    if datetime is not None:
        data["datetime"] = datetime
    return CityWeather.model_validate(data)


class FakeClock:
    """Settable epoch-seconds clock."""

    def __init__(self, now: float | None = None) -> None:
        self.now = float(now if now is not None else int(time.time()))

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeFetcher:
    """Scripted fetcher: per-city queue of results or exceptions.

    The last scripted item for a city is repeated once the queue runs dry.
    """

    def __init__(self) -> None:
        self.responses: dict[str, list] = {}
        self.calls: list[tuple[str, str]] = []
        self.closed = False

    def script(self, city: str, *results) -> None:
        self.responses[city] = list(results)

    def fetch(self, api_key: str, city: str):
        self.calls.append((api_key, city))
        queue = self.responses.get(city)
        if not queue:
            raise AssertionError(f"no response scripted for {city}")
        result = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(result, BaseException):
            raise result
        return result

    def calls_for(self, city: str) -> int:
        return sum(1 for _, c in self.calls if c == city)

    def close(self) -> None:
        self.closed = True


class RecordingExecutor:
    """Stand-in for DelayedExecutor that records tasks instead of running them."""

    def __init__(self) -> None:
        self.tasks: dict[str, tuple[float, object]] = {}
        self.history: list[tuple[str, float]] = []
        self.is_shutdown = False

    def call_later(self, delay, key, fn) -> bool:
        if self.is_shutdown:
            return False
        self.tasks[key] = (delay, fn)
        self.history.append((key, delay))
        return True

    def cancel(self, key) -> bool:
        return self.tasks.pop(key, None) is not None

    def pending_count(self) -> int:
        return len(self.tasks)

    def run(self, key) -> None:
        """Fire the pending task for *key*, as the worker thread would."""
        _delay, fn = self.tasks.pop(key)
        fn()

    def shutdown(self, wait=False, timeout=None) -> None:
        self.is_shutdown = True
        self.tasks.clear()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def executor() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture
def registry() -> ApiKeyRegistry:
    return ApiKeyRegistry()


@pytest.fixture
def mock_settings(monkeypatch):
    """Provide a Settings object with safe test defaults."""
    from groundhog.config import Settings, get_settings

    test_settings = Settings(
        openweather_api_key="test-key",
        openweather_base_url="https://weather.test/data/2.5/",
        request_timeout=5.0,
        cache_ttl_seconds=600,
        cache_capacity=10,
        min_refresh_interval_seconds=5.0,
        client_mode="on_demand",
    )

    get_settings.cache_clear()
    monkeypatch.setattr("groundhog.config.get_settings", lambda: test_settings)
    # Modules that import get_settings directly keep their own binding
    for mod_path in [
        "groundhog.client",
        "groundhog.services.http_client",
    ]:
        monkeypatch.setattr(f"{mod_path}.get_settings", lambda: test_settings)

    return test_settings
