"""Background refresh of cached weather while the client is polling.

Every cached city gets its own refresh chain: a one-shot task that fires
when the entry reaches its TTL, re-fetches the city, stores the result and
schedules the next task from the new observation time. A failed fetch
reschedules the old entry instead, so a chain only ends when the client
leaves polling mode or the city is evicted from the cache.
"""

import functools
import logging
import time
from collections.abc import Callable

from groundhog.errors import CityNotFoundError, WeatherClientError
from groundhog.models.weather import CityWeather
from groundhog.services.cache import CacheEntry, LRUCache
from groundhog.services.executor import DelayedExecutor

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """Keeps cached entries fresh on a background executor.

    Args:
        cache: The cache refreshed entries are written to.
        fetch: Looks up a city; returns None for an unusable response and
            raises on failure.
        is_polling: Reports whether the owning client is still in polling
            mode. Checked after every fetch.
        ttl: Seconds an observation stays fresh.
        executor: Where tasks run. Defaults to a new ``DelayedExecutor``.
        clock: Wall-clock source in epoch seconds.
        min_interval: Lower bound for the delay between two successful
            refreshes of the same city.
    """

    def __init__(
        self,
        cache: LRUCache,
        fetch: Callable[[str], CityWeather | None],
        is_polling: Callable[[], bool],
        ttl: int = 600,
        executor: DelayedExecutor | None = None,
        clock: Callable[[], float] = time.time,
        min_interval: float = 5.0,
    ) -> None:
        self._cache = cache
        self._fetch = fetch
        self._is_polling = is_polling
        self._ttl = ttl
        self._executor = executor or DelayedExecutor()
        self._clock = clock
        self._min_interval = min_interval

    @property
    def executor(self) -> DelayedExecutor:
        return self._executor

    def delay_for(self, entry: CacheEntry) -> float:
        """Seconds until *entry* reaches its TTL (negative if already past)."""
        return entry.observed_at + self._ttl - self._clock()

    def schedule_update(self, entry: CacheEntry, delay: float | None = None) -> bool:
        """Schedule a refresh of *entry*, replacing any pending one for its key.

        Returns False if the executor no longer accepts work.
        """
        if delay is None:
            delay = self.delay_for(entry)
        task = functools.partial(self.refresh, entry, delay)
        if not self._executor.call_later(delay, entry.key, task):
            logger.debug("Executor shut down, not scheduling refresh for %s", entry.key)
            return False
        logger.debug("Scheduled refresh for %s in %.1fs", entry.key, delay)
        return True

    def refresh(self, entry: CacheEntry, delay: float) -> None:
        """Refresh *entry* once and continue the chain.

        *delay* is the delay this task was scheduled with; a failed fetch is
        retried after the same delay, or after a full TTL if that delay was
        no longer than the minimum refresh interval.
        """
        fresh: CityWeather | None = None
        try:
            fresh = self._fetch(entry.key)
            if fresh is None:
                raise WeatherClientError(
                    f"Got empty result for {entry.key}", city=entry.key
                )
        except CityNotFoundError:
            # Retried like any other failure: the city may come back
            logger.warning("Background refresh: %s not found upstream", entry.key)
        except Exception as e:
            logger.warning("Couldn't automatically update %s: %s", entry.key, e)

        if not self._is_polling():
            logger.info("Client left polling mode, ending refresh of %s", entry.key)
            return
        if not self._cache.contains_key(entry.key):
            logger.info("%s was evicted, ending its refresh chain", entry.key)
            return

        if fresh is not None:
            new_entry = CacheEntry.from_weather(entry.key, fresh)
            self._cache.put(entry.key, new_entry)
            self.schedule_update(
                new_entry, max(self.delay_for(new_entry), self._min_interval)
            )
            return

        retry = delay if delay > self._min_interval else self._ttl
        logger.info("Will retry %s in %.0fs", entry.key, retry)
        self.schedule_update(entry, retry)
