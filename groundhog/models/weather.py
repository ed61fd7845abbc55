"""Weather data models."""

import time

from pydantic import BaseModel, ConfigDict, Field


class Weather(BaseModel):
    """Condition summary, e.g. ("Clouds", "scattered clouds")."""

    model_config = ConfigDict(frozen=True)

    main: str
    description: str


class Temperature(BaseModel):
    """Temperatures in Kelvin."""

    model_config = ConfigDict(frozen=True)

    temp: float
    feels_like: float


class Wind(BaseModel):
    model_config = ConfigDict(frozen=True)

    speed: float  # m/s


class Sys(BaseModel):
    model_config = ConfigDict(frozen=True)

    sunrise: int
    sunset: int


class CityWeather(BaseModel):
    """Current weather for a city as exposed by the SDK.

    Serializes to::

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

    model_config = ConfigDict(frozen=True)

    weather: Weather
    temperature: Temperature
    visibility: int
    wind: Wind
    datetime: int  # UNIX epoch seconds the observation applies to
    sys: Sys
    timezone: int  # offset from UTC in seconds
    name: str

    def is_expired(self, now: float | None = None, ttl: int = 600) -> bool:
        """Return True if the observation is older than *ttl* seconds."""
        if now is None:
            now = time.time()
        return now - self.datetime > ttl

    def to_json(self) -> str:
        return self.model_dump_json()


class _Main(BaseModel):
    temp: float
    feels_like: float


class WeatherModel(BaseModel):
    """Raw OpenWeatherMap ``/weather`` response.

    Only the fields the SDK exposes are declared; everything else in the
    payload is ignored.
    """

    model_config = ConfigDict(extra="ignore")

    weather: list[Weather] = Field(min_length=1)
    main: _Main
    visibility: int = 0
    wind: Wind
    dt: int
    sys: Sys
    timezone: int = 0
    name: str

    def to_city_weather(self) -> CityWeather:
        """Convert to the public model, keeping only the first condition."""
        return CityWeather(
            weather=self.weather[0],
            temperature=Temperature(temp=self.main.temp, feels_like=self.main.feels_like),
            visibility=self.visibility,
            wind=self.wind,
            datetime=self.dt,
            sys=self.sys,
            timezone=self.timezone,
            name=self.name,
        )


class ApiError(BaseModel):
    """Error body returned by the API, e.g. ``{"cod": "404", "message": "city not found"}``."""

    cod: int
    message: str = ""
