"""Resolve device coordinates through a geolocation provider."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from weather_dashboard.config import GEOLOCATION_RETRY_DELAY_SECONDS
from weather_dashboard.errors import LocationUnavailable, PermissionDenied, UnsupportedCapability
from weather_dashboard.location.geolocation import (
    GeolocationProvider, PermissionState, PositionError, PositionErrorCode
)
from weather_dashboard.weather.models import Coordinates

logger = logging.getLogger(__name__)

UNSUPPORTED_MESSAGE = "Geolocation is not supported by this browser."
BLOCKED_MESSAGE = "Geolocation access denied. Please enable it in your browser settings and try again."
RETRYING_MESSAGE = "Location access was denied. Please allow location access to use this feature."
RETRY_FAILED_MESSAGE = (
    "Failed to get location after retry. Please enable location in settings or enter a city manually."
)

RetryNotice = Callable[[str], Awaitable[None]]


class LocationResolver:
    """Turns a geolocation provider into coordinates or a LocationError.

    A position request refused for permission reasons is retried once after
    a fixed delay; every other failure is final.
    """

    def __init__(
        self,
        retry_delay: float = GEOLOCATION_RETRY_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        """Initialize the resolver.

        Args:
            retry_delay: Seconds to wait before the single retry
            sleep: Awaitable used to wait out the delay
        """
        self.retry_delay = retry_delay
        self._sleep = sleep

    async def resolve(
        self,
        provider: GeolocationProvider,
        on_retry: Optional[RetryNotice] = None
    ) -> Coordinates:
        """Resolve the device position.

        Args:
            provider: Device geolocation capability
            on_retry: Called with the interim message before the retry is scheduled

        Returns:
            Coordinates reported by the device

        Raises:
            UnsupportedCapability: If the device has no geolocation
            PermissionDenied: If permission is already denied
            LocationUnavailable: If the position request fails for good
        """
        if not provider.supported:
            logger.warning("Geolocation requested but not supported")
            raise UnsupportedCapability(UNSUPPORTED_MESSAGE)

        permission = await provider.query_permission()
        if permission == PermissionState.DENIED:
            logger.info("Geolocation permission denied, not requesting position")
            raise PermissionDenied(BLOCKED_MESSAGE)

        try:
            coordinates = await provider.get_current_position()
        except PositionError as e:
            if e.code != PositionErrorCode.PERMISSION_DENIED:
                logger.warning(f"Geolocation failed: {e.message}")
                raise LocationUnavailable(f"Geolocation error: {e.message}")
            return await self._retry(provider, on_retry)

        logger.info(f"Resolved device position to ({coordinates.lat}, {coordinates.lon})")
        return coordinates

    async def _retry(self, provider: GeolocationProvider, on_retry: Optional[RetryNotice]) -> Coordinates:
        logger.info(f"Position request denied, retrying once in {self.retry_delay}s")
        if on_retry is not None:
            await on_retry(RETRYING_MESSAGE)

        await self._sleep(self.retry_delay)

        try:
            coordinates = await provider.get_current_position()
        except PositionError as e:
            logger.warning(f"Geolocation retry failed: {e.message}")
            raise LocationUnavailable(RETRY_FAILED_MESSAGE)

        logger.info(f"Resolved device position on retry to ({coordinates.lat}, {coordinates.lon})")
        return coordinates
