"""Weather service joining the current-weather and forecast requests."""

import asyncio
import logging
from typing import Optional

from weather_dashboard.weather.client import OpenWeatherClient
from weather_dashboard.weather.models import Location, WeatherReport

logger = logging.getLogger(__name__)


class WeatherService:
    """Service that fetches a complete weather report for a location."""

    def __init__(self, client: Optional[OpenWeatherClient] = None):
        """Initialize the weather service.

        Args:
            client: Weather client instance (creates default if None)
        """
        self.client = client or OpenWeatherClient()

    async def fetch_weather(self, location: Location) -> WeatherReport:
        """Fetch current conditions and forecast concurrently.

        Both requests must succeed; the report is never built from one of them.

        Args:
            location: City name or coordinates to query

        Returns:
            WeatherReport for the location

        Raises:
            DataUnavailable: If either request fails
        """
        requests = [
            asyncio.ensure_future(self.client.get_current_weather(location)),
            asyncio.ensure_future(self.client.get_forecast(location)),
        ]
        try:
            current, forecast = await asyncio.gather(*requests)
        except BaseException:
            # One request failed or the fetch was cancelled; stop the other
            for request in requests:
                request.cancel()
            await asyncio.gather(*requests, return_exceptions=True)
            raise

        logger.info(
            f"Fetched weather for {location.describe()}: {current.name or 'unnamed place'}, "
            f"{len(forecast.points)} forecast points"
        )
        return WeatherReport(location=location, current=current, forecast=forecast)

    async def aclose(self):
        """Close the weather client."""
        if self.client:
            try:
                await self.client.aclose()
            except Exception as e:
                logger.error(f"Error closing weather client: {e}")

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()
