"""Bounded LRU cache for weather entries."""

import threading
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from groundhog.models.weather import CityWeather


@dataclass(frozen=True)
class CacheEntry:
    """One cached observation, keyed by the city name the caller asked for.

    ``observed_at`` is the observation time reported by the API, not the
    time the entry was stored.
    """

    key: str
    value: CityWeather
    observed_at: int

    @classmethod
    def from_weather(cls, key: str, weather: CityWeather) -> "CacheEntry":
        return cls(key=key, value=weather, observed_at=weather.datetime)


class LRUCache:
    """Thread-safe in-memory cache with fixed capacity and LRU eviction.

    Both ``get`` and ``put`` count as an access. Expiry is not handled here;
    callers decide whether a stored value is still usable.

    Usage::

        cache = LRUCache(capacity=10)
        cache.put("Berlin", entry)
        hit = cache.get("Berlin")  # returns entry or None if missing
    """

    def __init__(self, capacity: int = 10) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self._capacity = capacity
        self._lock = threading.Lock()
        # OrderedDict keeps access order: first item is least recently used
        self._store: OrderedDict[str, Any] = OrderedDict()

    @property
    def capacity(self) -> int:
        return self._capacity

    def get(self, key: str) -> Any | None:
        """Return the stored value and mark it most recently used, else None."""
        with self._lock:
            value = self._store.get(key)
            if value is None:
                return None
            self._store.move_to_end(key)
            return value

    def put(self, key: str, value: Any) -> None:
        """Store *value* under *key*, evicting the least recently used entry if full."""
        with self._lock:
            if key in self._store:
                self._store.move_to_end(key)
            self._store[key] = value
            if len(self._store) > self._capacity:
                self._store.popitem(last=False)

    def contains_key(self, key: str) -> bool:
        """Membership check. Does not change the access order."""
        with self._lock:
            return key in self._store

    def size(self) -> int:
        with self._lock:
            return len(self._store)

    def for_each_value(self, fn: Callable[[Any], None]) -> None:
        """Call *fn* for every value in a snapshot taken under the lock.

        *fn* runs outside the lock, so it may call back into the cache.
        """
        with self._lock:
            snapshot = list(self._store.values())
        for value in snapshot:
            fn(value)

    def keys(self) -> list[str]:
        """Keys from least to most recently used."""
        with self._lock:
            return list(self._store.keys())

    def __contains__(self, key: object) -> bool:
        return self.contains_key(key)  # type: ignore[arg-type]

    def __len__(self) -> int:
        return self.size()
