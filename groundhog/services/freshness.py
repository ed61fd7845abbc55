"""Freshness policy: decides whether a cached entry can be served as-is."""

from enum import Enum

from groundhog.services.cache import CacheEntry


class ClientMode(str, Enum):
    """Operational modes for the weather client."""

    # Fetch on every call unless the cached value is within the TTL.
    ON_DEMAND = "on_demand"
    # Serve whatever is cached; a background refresher keeps it current.
    POLLING = "polling"


def is_usable(entry: CacheEntry, now: float, ttl: int, mode: ClientMode) -> bool:
    """Return True if *entry* may be returned without hitting the API.

    In polling mode any resident entry is usable: freshness is maintained by
    the refresh scheduler, at the cost of a short window where the value may
    be slightly past its TTL.
    """
    if mode is ClientMode.POLLING:
        return True
    return now - entry.observed_at <= ttl
