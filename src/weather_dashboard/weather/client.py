"""HTTP client for the OpenWeather API."""

import logging
from typing import Any, Dict, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from weather_dashboard.config import (
    OPENWEATHER_API_KEY, OPENWEATHER_BASE_URL, REQUEST_TIMEOUT_SECONDS, UNITS
)
from weather_dashboard.errors import DataUnavailable
from weather_dashboard.weather.models import CurrentConditions, ForecastSeries, Location

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class OpenWeatherClient:
    """Async client for the current-weather and forecast endpoints."""

    def __init__(
        self,
        api_key: str = OPENWEATHER_API_KEY,
        base_url: str = OPENWEATHER_BASE_URL,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        """Initialize the weather client.

        Args:
            api_key: OpenWeather API key sent as ``appid``
            base_url: Base URL of the OpenWeather data API
            http_client: Shared httpx client (creates one if None)
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.client = http_client or httpx.AsyncClient(timeout=REQUEST_TIMEOUT_SECONDS)

    def build_params(self, location: Location) -> Dict[str, Any]:
        """Build query parameters for a location.

        Args:
            location: City name or coordinates to query

        Returns:
            Query parameters including units and API key
        """
        if location.coordinates is not None:
            params: Dict[str, Any] = {
                "lat": location.coordinates.lat,
                "lon": location.coordinates.lon,
            }
        else:
            params = {"q": location.city}

        params["units"] = UNITS
        params["appid"] = self.api_key
        return params

    async def get_current_weather(self, location: Location) -> CurrentConditions:
        """Fetch current conditions for a location.

        Raises:
            DataUnavailable: If the request fails or the response is unusable
        """
        return await self._fetch("weather", location, CurrentConditions)

    async def get_forecast(self, location: Location) -> ForecastSeries:
        """Fetch the 5-day / 3-hour forecast for a location.

        Raises:
            DataUnavailable: If the request fails or the response is unusable
        """
        return await self._fetch("forecast", location, ForecastSeries)

    async def _fetch(self, endpoint: str, location: Location, model: Type[ModelT]) -> ModelT:
        url = f"{self.base_url}/{endpoint}"
        logger.info(f"Fetching {endpoint} for {location.describe()}")

        try:
            response = await self.client.get(url, params=self.build_params(location))
        except httpx.RequestError as e:
            logger.error(f"Request error to OpenWeather {endpoint} endpoint: {e}")
            raise DataUnavailable() from e

        if not response.is_success:
            logger.error(f"HTTP error from OpenWeather {endpoint} endpoint: {response.status_code} - {response.text}")
            raise DataUnavailable(status_code=response.status_code)

        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"Invalid {endpoint} response format: {e}")
            raise DataUnavailable(status_code=response.status_code) from e

    async def aclose(self):
        """Close the async HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()
