"""Data models for the weather dashboard."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Coordinates(BaseModel):
    """Geographic coordinate pair."""
    lat: float = Field(..., ge=-90, le=90, description="Latitude in decimal degrees")
    lon: float = Field(..., ge=-180, le=180, description="Longitude in decimal degrees")


class Location(BaseModel):
    """Location to query: a city name or coordinates, never both."""
    city: Optional[str] = Field(None, description="Free-text city name")
    coordinates: Optional[Coordinates] = Field(None, description="Device coordinates")

    @model_validator(mode="after")
    def check_exclusive(self) -> "Location":
        if (self.city is None) == (self.coordinates is None):
            raise ValueError("Location needs exactly one of city or coordinates")
        return self

    @classmethod
    def from_city(cls, city: str) -> "Location":
        return cls(city=city)

    @classmethod
    def from_coordinates(cls, lat: float, lon: float) -> "Location":
        return cls(coordinates=Coordinates(lat=lat, lon=lon))

    @property
    def by_coordinates(self) -> bool:
        return self.coordinates is not None

    def describe(self) -> str:
        if self.coordinates is not None:
            return f"({self.coordinates.lat}, {self.coordinates.lon})"
        return repr(self.city)


class WeatherCondition(BaseModel):
    """Weather category and description."""
    main: str = Field(..., description="Weather category, e.g. Rain")
    description: str = Field("", description="Human readable description")


class MainReadings(BaseModel):
    """Current temperature, humidity and pressure readings."""
    temp: float = Field(..., description="Temperature in Celsius")
    feels_like: float = Field(..., description="Feels-like temperature in Celsius")
    humidity: int = Field(..., description="Humidity percentage")
    pressure: int = Field(..., description="Pressure in hPa")


class Wind(BaseModel):
    """Wind speed and direction."""
    speed: float = Field(..., description="Wind speed in m/s")
    deg: int = Field(0, description="Wind direction in degrees")


class Clouds(BaseModel):
    """Cloud cover."""
    all: int = Field(..., description="Cloudiness percentage")


class SunTimes(BaseModel):
    """Sunrise and sunset."""
    sunrise: int = Field(..., description="Sunrise as epoch seconds")
    sunset: int = Field(..., description="Sunset as epoch seconds")


class CurrentConditions(BaseModel):
    """Current weather response from the OpenWeather API."""
    name: str = Field("", description="Place name")
    main: MainReadings
    weather: List[WeatherCondition] = Field(default_factory=list)
    wind: Wind
    clouds: Clouds
    sys: SunTimes
    timezone: int = Field(0, description="Shift in seconds from UTC")

    @property
    def primary_weather(self) -> Optional[WeatherCondition]:
        return self.weather[0] if self.weather else None


class ForecastReadings(BaseModel):
    """Temperatures of one forecast point."""
    temp: float
    temp_max: float
    temp_min: float


class ForecastWind(BaseModel):
    """Wind of one forecast point."""
    speed: float


class ForecastPoint(BaseModel):
    """One 3-hour forecast point."""
    dt: int = Field(..., description="Forecast time as epoch seconds")
    main: ForecastReadings
    weather: List[WeatherCondition] = Field(default_factory=list)
    wind: ForecastWind

    @property
    def primary_weather(self) -> Optional[WeatherCondition]:
        return self.weather[0] if self.weather else None


class ForecastCity(BaseModel):
    """City block of the forecast response."""
    name: str = ""
    timezone: int = Field(0, description="Shift in seconds from UTC")


class ForecastSeries(BaseModel):
    """5-day / 3-hour forecast response from the OpenWeather API."""
    model_config = ConfigDict(populate_by_name=True)

    points: List[ForecastPoint] = Field(default_factory=list, alias="list")
    city: Optional[ForecastCity] = None


class WeatherReport(BaseModel):
    """Current conditions and forecast fetched together for one location."""
    location: Location
    current: CurrentConditions
    forecast: ForecastSeries
