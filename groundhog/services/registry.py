"""Registry of API keys held by live clients."""

import threading

from groundhog.errors import InvalidStateError


class ApiKeyRegistry:
    """Tracks which API keys are in use so two clients never poll with the same key.

    A key is acquired when a client is built and released when it is closed.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._keys: set[str] = set()

    def acquire(self, api_key: str) -> None:
        """Claim *api_key*.

        Raises:
            InvalidStateError: if the key is empty or already held.
        """
        if not api_key or not api_key.strip():
            raise InvalidStateError("API key must be provided")
        with self._lock:
            if api_key in self._keys:
                raise InvalidStateError(f"API key {api_key} is already in use")
            self._keys.add(api_key)

    def release(self, api_key: str) -> bool:
        """Release *api_key*. Returns False if it was not held."""
        with self._lock:
            if api_key not in self._keys:
                return False
            self._keys.discard(api_key)
            return True

    def clear(self) -> None:
        with self._lock:
            self._keys.clear()

    def __contains__(self, api_key: object) -> bool:
        with self._lock:
            return api_key in self._keys

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)


# Process-wide default, used when a client is built without an explicit registry
default_registry = ApiKeyRegistry()
