"""Exceptions raised by the weather client."""


class WeatherError(Exception):
    """Base class for all SDK errors."""


class CityNotFoundError(WeatherError):
    """The API confirmed the requested city does not exist (HTTP 404)."""

    def __init__(self, city: str) -> None:
        super().__init__(f"{city} not found")
        self.city = city


class WeatherClientError(WeatherError):
    """Network, transport or protocol failure while fetching weather.

    ``cause`` is also chained as ``__cause__`` when raised with ``from``.
    """

    def __init__(
        self,
        message: str,
        city: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.city = city
        self.cause = cause


class InvalidStateError(WeatherError):
    """Operation on a closed client, or invalid client configuration."""
