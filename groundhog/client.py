"""Weather client — cached access to OpenWeatherMap current weather.

Two operational modes:

- ``ON_DEMAND`` (default): a cached value is returned while it is within the
  TTL; otherwise the API is called on the caller's thread.
- ``POLLING``: any cached value is returned immediately and a background
  thread refreshes each cached city as it reaches its TTL.

Usage::

    with WeatherClient("your_api_key") as client:
        berlin = client.get_weather_for("Berlin")
        print(berlin.temperature.temp)
"""

import logging
import threading
import time
from collections.abc import Callable

import httpx

from groundhog.config import Settings, get_settings
from groundhog.errors import InvalidStateError, WeatherClientError
from groundhog.models.weather import CityWeather
from groundhog.services.cache import CacheEntry, LRUCache
from groundhog.services.executor import DelayedExecutor
from groundhog.services.freshness import ClientMode, is_usable
from groundhog.services.http_client import OpenWeatherFetcher, WeatherFetcher
from groundhog.services.refresh import RefreshScheduler
from groundhog.services.registry import ApiKeyRegistry, default_registry

logger = logging.getLogger(__name__)


class WeatherClient:
    """Thread-safe weather client with an LRU cache and optional polling.

    Each client holds its API key exclusively in *registry* until
    ``close()`` is called; building a second client with the same key
    raises ``InvalidStateError``. Options not passed explicitly come from
    *settings*, or ``get_settings()`` when that is omitted.
    """

    def __init__(
        self,
        api_key: str,
        *,
        mode: ClientMode | str = ClientMode.ON_DEMAND,
        fetcher: WeatherFetcher | None = None,
        registry: ApiKeyRegistry | None = None,
        ttl: int | None = None,
        capacity: int | None = None,
        min_refresh_interval: float | None = None,
        executor: DelayedExecutor | None = None,
        clock: Callable[[], float] = time.time,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or get_settings()
        self._mode = ClientMode(mode)
        self._ttl = ttl if ttl is not None else settings.cache_ttl_seconds
        self._cache = LRUCache(
            capacity if capacity is not None else settings.cache_capacity
        )
        self._clock = clock

        self._api_key = api_key
        self._owns_fetcher = fetcher is None
        self._owns_executor = executor is None
        self._fetcher: WeatherFetcher = fetcher or OpenWeatherFetcher(
            base_url=settings.openweather_base_url,
            timeout=settings.request_timeout,
        )
        self._scheduler = RefreshScheduler(
            cache=self._cache,
            fetch=self._fetch_from_api,
            is_polling=self._is_polling,
            ttl=self._ttl,
            executor=executor,
            clock=clock,
            min_interval=(
                min_refresh_interval
                if min_refresh_interval is not None
                else settings.min_refresh_interval_seconds
            ),
        )
        # Guards mode transitions against close()
        self._lock = threading.Lock()
        self._closed = False

        # Claimed last so a failed constructor never leaves the key held
        self._registry = registry if registry is not None else default_registry
        try:
            self._registry.acquire(api_key)
        except InvalidStateError:
            self._close_fetcher()
            raise

    @classmethod
    def from_settings(
        cls, settings: Settings | None = None, **overrides
    ) -> "WeatherClient":
        """Build a client from environment settings.

        Keyword *overrides* are passed through to the constructor.
        """
        settings = settings or get_settings()
        overrides.setdefault("mode", settings.client_mode)
        return cls(settings.openweather_api_key, settings=settings, **overrides)

    @property
    def mode(self) -> ClientMode:
        return self._mode

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def ttl(self) -> int:
        return self._ttl

    def get_weather_for(self, city: str) -> CityWeather:
        """Return the current weather for *city*.

        Served from cache when the cached value is usable in the current
        mode; otherwise fetched, cached, and (in polling mode) scheduled for
        background refresh.

        Raises:
            CityNotFoundError: the API does not know *city*.
            WeatherClientError: network or API failure, or an unusable response.
            InvalidStateError: the client is closed.
            ValueError: *city* is blank.
        """
        if self._closed:
            raise InvalidStateError("Client is closed. Build a new one")
        if not city or not city.strip():
            raise ValueError("city must not be blank")

        entry = self._cache.get(city)
        if entry is not None and is_usable(entry, self._clock(), self._ttl, self._mode):
            logger.debug("Cache hit for %s", city)
            return entry.value

        try:
            weather = self._fetch_from_api(city)
        except httpx.HTTPError as e:
            raise WeatherClientError(
                f"Failed to fetch weather for city: {city}", city=city, cause=e
            ) from e
        if weather is None:
            raise WeatherClientError(
                f"Got empty result for {city}. Probably problem with deserialization",
                city=city,
            )

        entry = CacheEntry.from_weather(city, weather)
        self._cache.put(city, entry)
        if self._mode is ClientMode.POLLING:
            self._scheduler.schedule_update(entry)
        return weather

    def set_mode(self, mode: ClientMode | str) -> None:
        """Change the operational mode at runtime.

        Switching to polling schedules a refresh for every city currently in
        the cache. Switching back to on-demand leaves pending refreshes in
        place; each one ends itself when it next fires.
        """
        mode = ClientMode(mode)
        with self._lock:
            if self._closed:
                raise InvalidStateError("Client is closed. Build a new one")
            if self._mode is mode:
                return
            self._mode = mode
            logger.info("Client mode set to %s", mode.value)
            if mode is ClientMode.POLLING:
                self._cache.for_each_value(self._scheduler.schedule_update)

    def close(self) -> None:
        """Stop background refreshes and release the API key. Idempotent."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        if self._owns_executor:
            self._scheduler.executor.shutdown()
        else:
            # Shared executor: drop only this client's refreshes
            for key in self._cache.keys():
                self._scheduler.executor.cancel(key)
        self._close_fetcher()
        self._registry.release(self._api_key)
        logger.info("Weather client closed")

    def __enter__(self) -> "WeatherClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _is_polling(self) -> bool:
        return self._mode is ClientMode.POLLING and not self._closed

    def _close_fetcher(self) -> None:
        if not self._owns_fetcher:
            return
        close = getattr(self._fetcher, "close", None)
        if close is not None:
            close()

    def _fetch_from_api(self, city: str) -> CityWeather | None:
        return self._fetcher.fetch(self._api_key, city)
