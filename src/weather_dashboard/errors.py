"""Errors surfaced to the dashboard user."""

from typing import Optional


class DashboardError(Exception):
    """Base class for failures whose message is shown in the error banner."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class LocationError(DashboardError):
    """Raised when device geolocation cannot produce coordinates."""
    pass


class UnsupportedCapability(LocationError):
    """The device has no geolocation capability."""
    pass


class PermissionDenied(LocationError):
    """Geolocation permission was explicitly denied."""
    pass


class LocationUnavailable(LocationError):
    """Geolocation failed for good (retry exhausted or non-permission failure)."""
    pass


class DataUnavailable(DashboardError):
    """Raised when either weather request fails."""

    MESSAGE = "Location not found or API error"

    def __init__(self, status_code: Optional[int] = None):
        super().__init__(self.MESSAGE)
        self.status_code = status_code
