"""Device geolocation capability as seen by the dashboard."""

from abc import ABC, abstractmethod
from enum import Enum, IntEnum
from typing import Optional

from weather_dashboard.weather.models import Coordinates


class PermissionState(str, Enum):
    """Result of a geolocation permission query."""
    GRANTED = "granted"
    PROMPT = "prompt"
    DENIED = "denied"


class PositionErrorCode(IntEnum):
    """Reasons a position request can fail (W3C numbering)."""
    PERMISSION_DENIED = 1
    POSITION_UNAVAILABLE = 2
    TIMEOUT = 3


class PositionError(Exception):
    """Raised when the device cannot report a position."""

    def __init__(self, code: PositionErrorCode, message: str = ""):
        super().__init__(message or code.name)
        self.code = code
        self.message = message or code.name.replace("_", " ").lower()


class GeolocationProvider(ABC):
    """Source of device coordinates."""

    @property
    @abstractmethod
    def supported(self) -> bool:
        """Whether the device has a geolocation capability at all."""

    @abstractmethod
    async def query_permission(self) -> Optional[PermissionState]:
        """Return the current permission state, or None when it cannot be queried."""

    @abstractmethod
    async def get_current_position(self) -> Coordinates:
        """Request the current position.

        Raises:
            PositionError: If the device refuses or fails to report a position
        """
